"""Paystub layout identification.

Recognizes which payroll service issued a paystub from phrases printed in
the transcript's header lines. Phrase sets can be overridden from YAML.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from crewbooks_ocr.utils.logger import get_logger

from .records import LayoutTag

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdentifyingRule:
    """Phrases that together identify a layout.

    A rule matches when every ``all_of`` phrase and no ``none_of`` phrase
    occurs in the upper-cased header text.
    """

    all_of: tuple[str, ...]
    none_of: tuple[str, ...] = ()

    def matches(self, header: str) -> bool:
        return all(p in header for p in self.all_of) and not any(
            p in header for p in self.none_of
        )


DEFAULT_LAYOUT_RULES: dict[LayoutTag, tuple[IdentifyingRule, ...]] = {
    LayoutTag.ENTERTAINMENT_PARTNERS: (
        IdentifyingRule(("ENTERTAINMENT PARTNERS",)),
        IdentifyingRule(("ENTERTAINMENTPARTNERS",)),
        # OCR often splits the logo, leaving "ep" near "Payroll".
        IdentifyingRule(("EP", "PAYROLL")),
        IdentifyingRule(("EP PARTNERS",)),
        IdentifyingRule(("ENTERTAINMENT", "PARTNERS")),
        IdentifyingRule(("TIME REPORT SUMMARY",)),
        IdentifyingRule(("PERIOD ENDING",), ("PAY PERIOD",)),
    ),
    LayoutTag.CAST_AND_CREW: (
        IdentifyingRule(("CAST AND CREW",)),
        IdentifyingRule(("CASTANDCREW",)),
        IdentifyingRule(("CC", "PAYROLL")),
    ),
}


class LayoutClassifier:
    """Tags a paystub transcript with the layout of its payroll service.

    Layouts are tried in declaration order and the first whose rules match
    wins. A transcript matching none is tagged ``UNKNOWN``, which callers
    route to the generic extraction profile.

    Args:
        layouts_path: Optional YAML file overriding the default rules.
        scan_lines: Number of leading transcript lines inspected.
    """

    def __init__(
        self,
        layouts_path: Path | None = None,
        scan_lines: int = 50,
    ) -> None:
        self.scan_lines = scan_lines
        self.rules = self._load_rules(layouts_path)

    def _load_rules(
        self, path: Path | None
    ) -> dict[LayoutTag, tuple[IdentifyingRule, ...]]:
        """Load layout rules from YAML, falling back to the built-in set.

        Args:
            path: Path to the layouts YAML file.

        Returns:
            Ordered mapping of layout to its identifying rules.
        """
        if path is None or not path.exists():
            logger.debug("No layouts file at %s, using built-in rules", path)
            return dict(DEFAULT_LAYOUT_RULES)

        with open(path) as f:
            data = yaml.safe_load(f)
        if not data:
            logger.debug("Layouts file %s is empty, using built-in rules", path)
            return dict(DEFAULT_LAYOUT_RULES)

        rules: dict[LayoutTag, tuple[IdentifyingRule, ...]] = {}
        for name, entries in data.items():
            try:
                layout = LayoutTag(name)
            except ValueError:
                logger.warning("Ignoring unknown layout %r in %s", name, path)
                continue
            if layout is LayoutTag.UNKNOWN:
                continue
            rules[layout] = tuple(self._parse_rule(entry) for entry in entries or [])
        logger.info("Loaded %d layout definitions from %s", len(rules), path)
        return rules

    @staticmethod
    def _parse_rule(entry: dict[str, Any]) -> IdentifyingRule:
        return IdentifyingRule(
            all_of=tuple(str(p).upper() for p in entry.get("all", [])),
            none_of=tuple(str(p).upper() for p in entry.get("none", [])),
        )

    def header(self, text: str) -> str:
        """Upper-cased leading lines that identification looks at."""
        return "\n".join(text.upper().split("\n")[: self.scan_lines])

    def classify(self, text: str | None) -> LayoutTag:
        """Identify the layout of a paystub transcript.

        Args:
            text: Raw OCR transcript.

        Returns:
            The first matching layout, or ``LayoutTag.UNKNOWN``.
        """
        if not text:
            return LayoutTag.UNKNOWN

        header = self.header(text)
        for layout, rules in self.rules.items():
            if any(rule.all_of and rule.matches(header) for rule in rules):
                logger.debug("Classified paystub as %s", layout.value)
                return layout

        logger.debug("Paystub layout not recognized")
        return LayoutTag.UNKNOWN
