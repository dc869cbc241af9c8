"""Label-anchored field scanners for OCR transcripts.

Each extractor looks for one of its anchor labels (regexes, tried in the
declared priority order) and captures the token that follows on the same
line. The first anchor occurrence whose token normalizes successfully
wins; matches are never combined.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from crewbooks_ocr.normalization.values import (
    AMOUNT_TOKEN,
    DATE_TOKEN,
    ZERO,
    parse_amount,
    parse_date,
)
from crewbooks_ocr.utils.logger import get_logger

logger = get_logger(__name__)

# Label and value sit on the same line: only horizontal whitespace between.
_GAP = r"(?:[^\S\n]|[:#])*"
_CURRENCY = r"(?:CA\$|C\$|CAD|USD|\$)?[^\S\n]*"
_DOLLAR_AMOUNT = re.compile(r"\$[^\S\n]*(" + AMOUNT_TOKEN + r")")
_BARE_DATE = re.compile(r"(?<!\d)(" + DATE_TOKEN + r")(?!\d)", re.IGNORECASE)


@dataclass
class AnchorMatch:
    """A field value captured from a transcript."""

    field_name: str
    value: Any
    anchor: str | None
    start_pos: int
    end_pos: int
    extraction_method: str


@dataclass(frozen=True)
class SearchWindow:
    """Portion of the transcript an extractor is allowed to look at.

    Args:
        first_lines: Keep only this many leading lines.
        after: Regex; start the window at its first occurrence. When the
            regex does not occur the whole text is used.
    """

    first_lines: int | None = None
    after: str | None = None

    def apply(self, text: str) -> tuple[str, int]:
        """Return the windowed text and its offset into ``text``."""
        offset = 0
        if self.after:
            match = re.search(self.after, text, re.IGNORECASE)
            if match:
                offset = match.start()
                text = text[offset:]
        if self.first_lines is not None:
            text = "\n".join(text.split("\n")[: self.first_lines])
        return text, offset


class AnchorExtractor:
    """Base class for scanners that capture a token after an anchor label.

    Args:
        field_name: Canonical field the captured value belongs to.
        anchors: Label regexes in priority order.
        window: Region of the transcript to search.
    """

    token_pattern: str = ""
    extraction_method: str = "anchor"

    def __init__(
        self,
        field_name: str,
        anchors: Sequence[str],
        window: SearchWindow | None = None,
    ) -> None:
        self.field_name = field_name
        self.anchors = tuple(anchors)
        self.window = window or SearchWindow()
        self._compiled = [
            (anchor, re.compile(self._pattern_for(anchor), re.IGNORECASE))
            for anchor in self.anchors
        ]

    def _pattern_for(self, anchor: str) -> str:
        return f"(?:{anchor}){_GAP}({self.token_pattern})"

    def convert(self, token: str) -> Any:
        """Normalize a captured token; ``None`` marks it as malformed."""
        return token.strip() or None

    def extract(self, text: str | None) -> AnchorMatch | None:
        """Scan ``text`` and return the first plausible value, if any.

        Args:
            text: Raw OCR transcript.

        Returns:
            The captured field, or ``None`` when nothing plausible is found.
        """
        if not text:
            return None

        scope, offset = self.window.apply(text)
        for anchor, pattern in self._compiled:
            for match in pattern.finditer(scope):
                value = self.convert(match.group(1))
                if value is None:
                    logger.debug(
                        "%s: discarded token %r after anchor %r",
                        self.field_name,
                        match.group(1),
                        anchor,
                    )
                    continue
                logger.debug("%s: matched anchor %r", self.field_name, anchor)
                return AnchorMatch(
                    field_name=self.field_name,
                    value=value,
                    anchor=anchor,
                    start_pos=offset + match.start(),
                    end_pos=offset + match.end(),
                    extraction_method=self.extraction_method,
                )
        return self.fallback(scope, offset)

    def fallback(self, scope: str, offset: int) -> AnchorMatch | None:
        """Hook for subclasses; called when no anchor yields a value."""
        return None


class AmountExtractor(AnchorExtractor):
    """Captures the first amount following an anchor label.

    Args:
        skip_zero: Treat a zero amount as implausible and keep scanning.
        largest_fallback: When no anchor matches, return the largest
            ``$``-prefixed amount in the window (the grand total is usually
            the largest amount printed on a receipt).
    """

    token_pattern = AMOUNT_TOKEN
    extraction_method = "anchor_amount"

    def __init__(
        self,
        field_name: str,
        anchors: Sequence[str],
        window: SearchWindow | None = None,
        skip_zero: bool = False,
        largest_fallback: bool = False,
    ) -> None:
        super().__init__(field_name, anchors, window)
        self.skip_zero = skip_zero
        self.largest_fallback = largest_fallback

    def _pattern_for(self, anchor: str) -> str:
        return f"(?:{anchor}){_GAP}{_CURRENCY}({self.token_pattern})"

    def convert(self, token: str) -> Decimal | None:
        amount = parse_amount(token)
        if amount is None or (self.skip_zero and amount == ZERO):
            return None
        return amount

    def fallback(self, scope: str, offset: int) -> AnchorMatch | None:
        if not self.largest_fallback:
            return None

        best: AnchorMatch | None = None
        for match in _DOLLAR_AMOUNT.finditer(scope):
            amount = self.convert(match.group(1))
            if amount is None:
                continue
            if best is None or amount > best.value:
                best = AnchorMatch(
                    field_name=self.field_name,
                    value=amount,
                    anchor=None,
                    start_pos=offset + match.start(),
                    end_pos=offset + match.end(),
                    extraction_method="largest_amount",
                )
        if best is not None:
            logger.debug("%s: fell back to largest amount", self.field_name)
        return best


class DateExtractor(AnchorExtractor):
    """Captures the first valid date following an anchor label.

    With no anchors, the first valid date token anywhere in the window is
    taken instead.
    """

    token_pattern = DATE_TOKEN
    extraction_method = "anchor_date"

    def convert(self, token: str) -> str | None:
        return parse_date(token)

    def fallback(self, scope: str, offset: int) -> AnchorMatch | None:
        if self.anchors:
            return None
        for match in _BARE_DATE.finditer(scope):
            value = self.convert(match.group(1))
            if value is not None:
                return AnchorMatch(
                    field_name=self.field_name,
                    value=value,
                    anchor=None,
                    start_pos=offset + match.start(),
                    end_pos=offset + match.end(),
                    extraction_method="first_date",
                )
        return None


class TextExtractor(AnchorExtractor):
    """Captures the run of text after an anchor label.

    The run ends at the end of the line or at the first ``stop`` regex,
    whichever comes first.
    """

    extraction_method = "anchor_text"

    def __init__(
        self,
        field_name: str,
        anchors: Sequence[str],
        stops: Sequence[str] = (),
        window: SearchWindow | None = None,
    ) -> None:
        self.stops = tuple(stops)
        super().__init__(field_name, anchors, window)

    def _pattern_for(self, anchor: str) -> str:
        terminators = "|".join([*self.stops, r"\n", r"$"])
        # A run may not begin with a stop phrase.
        guard = f"(?!{'|'.join(self.stops)})" if self.stops else ""
        return f"(?:{anchor})(?:[^\\S\\n]|:)+{guard}([^\\n]+?)(?={terminators})"


class LeadingLineExtractor:
    """Returns the first leading line that does not look like a label.

    Used for vendor names, which receipts print near the top without a
    label. Candidate lines are the first ``max_lines`` non-empty lines.

    Args:
        field_name: Canonical field the line belongs to.
        max_lines: Number of non-empty leading lines to consider.
        min_length: Shortest acceptable line, inclusive.
        max_length: Longest acceptable line, inclusive.
        label_patterns: Regexes (matched at line start) marking label lines.
    """

    extraction_method = "leading_line"

    def __init__(
        self,
        field_name: str,
        max_lines: int = 10,
        min_length: int = 4,
        max_length: int = 49,
        label_patterns: Sequence[str] = (),
    ) -> None:
        self.field_name = field_name
        self.max_lines = max_lines
        self.min_length = min_length
        self.max_length = max_length
        self._labels = [re.compile(p, re.IGNORECASE) for p in label_patterns]

    def _is_label(self, line: str) -> bool:
        return any(p.match(line) for p in self._labels)

    def extract(self, text: str | None) -> AnchorMatch | None:
        if not text:
            return None

        candidates = [line.strip() for line in text.split("\n") if line.strip()]
        for line in candidates[: self.max_lines]:
            if not self.min_length <= len(line) <= self.max_length:
                continue
            if self._is_label(line):
                continue
            start = text.find(line)
            return AnchorMatch(
                field_name=self.field_name,
                value=line,
                anchor=None,
                start_pos=start,
                end_pos=start + len(line),
                extraction_method=self.extraction_method,
            )
        return None
