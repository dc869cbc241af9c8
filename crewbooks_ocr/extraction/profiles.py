"""Per-layout extraction profiles.

A profile is an ordered list of ``(field, extractor)`` pairs tuned to one
document layout's label vocabulary. Paystub profiles also carry the rule
deriving net gross income from the raw gross pay. The generic profile used
for unrecognized paystubs is a trial over the known profiles rather than a
separate vocabulary.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Any, Protocol

from crewbooks_ocr.normalization.values import ZERO
from crewbooks_ocr.utils.config import NormalizationConfig
from crewbooks_ocr.utils.logger import get_logger

from .anchors import (
    AmountExtractor,
    AnchorMatch,
    DateExtractor,
    LeadingLineExtractor,
    SearchWindow,
    TextExtractor,
)
from .records import LayoutTag

logger = get_logger(__name__)


class Extractor(Protocol):
    def extract(self, text: str | None) -> AnchorMatch | None: ...


class GrossDerivation(StrEnum):
    """How a layout turns raw gross pay into net gross income."""

    SUBTRACT_TAX = "subtract_tax"
    ADD_REIMBURSEMENTS = "add_reimbursements"


def derive_gross_income_net(
    rule: GrossDerivation, fields: dict[str, Any]
) -> Decimal | None:
    """Apply a derivation rule to already extracted fields.

    ``SUBTRACT_TAX`` needs the raw gross pay and floors the result at zero;
    a missing tax amount counts as zero. ``ADD_REIMBURSEMENTS`` needs at
    least one of its two operands.
    """
    raw = fields.get("gross_income_raw")
    if rule is GrossDerivation.SUBTRACT_TAX:
        if raw is None:
            return None
        return max(ZERO, raw - fields.get("tax_amount", ZERO))

    reimbursements = fields.get("reimbursements")
    if raw is None and reimbursements is None:
        return None
    return (raw or ZERO) + (reimbursements or ZERO)


@dataclass(frozen=True)
class ExtractionProfile:
    """Fixed field-to-extractor bindings for one layout."""

    name: str
    rules: tuple[tuple[str, Extractor], ...]
    derivation: GrossDerivation | None = None

    def collect(self, text: str | None, fields: dict[str, Any]) -> None:
        """Fill fields missing from ``fields`` using this profile's rules."""
        for field_name, extractor in self.rules:
            if field_name in fields:
                continue
            match = extractor.extract(text)
            if match is not None:
                fields[field_name] = match.value

    def derive(self, fields: dict[str, Any]) -> Decimal | None:
        if self.derivation is None:
            return None
        return derive_gross_income_net(self.derivation, fields)

    def run(self, text: str | None) -> dict[str, Any]:
        """Extract every field this profile knows about.

        Args:
            text: Raw OCR transcript.

        Returns:
            Mapping of canonical field names to values; undetermined fields
            are left out.
        """
        fields: dict[str, Any] = {}
        self.collect(text, fields)
        net = self.derive(fields)
        if net is not None:
            fields["gross_income_net"] = net
        logger.debug("Profile %s extracted %s", self.name, sorted(fields))
        return fields


@dataclass(frozen=True)
class CompositeProfile:
    """Tries several profiles in order, keeping each field's first success.

    Net gross income is derived with the first profile whose rule yields a
    value.
    """

    name: str
    profiles: tuple[ExtractionProfile, ...]

    def derive(self, fields: dict[str, Any]) -> Decimal | None:
        for profile in self.profiles:
            net = profile.derive(fields)
            if net is not None:
                return net
        return None

    def run(self, text: str | None) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for profile in self.profiles:
            profile.collect(text, fields)
        net = self.derive(fields)
        if net is not None:
            fields["gross_income_net"] = net
        logger.debug("Profile %s extracted %s", self.name, sorted(fields))
        return fields


_NET_PAY = (r"NET\s+PAY", r"AMOUNT\s+DEPOSITED")
_GROSS_PAY = (r"GROSS\s+PAY",)

ENTERTAINMENT_PARTNERS_PROFILE = ExtractionProfile(
    name=LayoutTag.ENTERTAINMENT_PARTNERS.value,
    rules=(
        ("date", DateExtractor("date", [r"PERIOD\s+ENDING"])),
        (
            "tax_amount",
            AmountExtractor("tax_amount", [r"G/HST\s*\(P\)", r"GST/HST", r"G/?HST"]),
        ),
        ("gross_income_raw", AmountExtractor("gross_income_raw", _GROSS_PAY)),
        ("net_income", AmountExtractor("net_income", _NET_PAY)),
        ("deductions", AmountExtractor("deductions", [r"TOTAL\s+DEDUCTIONS?"])),
        (
            "employer_or_production",
            TextExtractor("employer_or_production", [r"\bSHOW\b"], stops=[r"UNION:"]),
        ),
        # Union deductions sit in the DEDUCTIONS table, e.g. "Dues\t93.07\t137.50".
        (
            "insurance",
            AmountExtractor(
                "insurance",
                [r"\bINSURE\b", r"INS\.\s*DED", r"INSURE?(?:ANCE)?", r"\bINS\b\.?"],
                window=SearchWindow(after="DEDUCTIONS"),
            ),
        ),
        (
            "dues",
            AmountExtractor(
                "dues",
                [r"\bDUES\b", r"\bPERMIT\s+FEE", r"\bMEMBER\s+FEE"],
                window=SearchWindow(after="DEDUCTIONS"),
            ),
        ),
        (
            "pension",
            AmountExtractor(
                "pension",
                [r"\bPENSION\b", r"\bRETIR\.\s+EMP"],
                window=SearchWindow(after="DEDUCTIONS"),
            ),
        ),
        (
            "retirement",
            AmountExtractor(
                "retirement",
                [r"\bRETIRE\s+DED(?:UCT)?\b", r"\bRETIRE\b"],
                window=SearchWindow(after="DEDUCTIONS"),
            ),
        ),
    ),
    derivation=GrossDerivation.SUBTRACT_TAX,
)

CAST_AND_CREW_PROFILE = ExtractionProfile(
    name=LayoutTag.CAST_AND_CREW.value,
    rules=(
        ("date", DateExtractor("date", [r"PAY\s+PERIOD"])),
        (
            "tax_amount",
            AmountExtractor("tax_amount", [r"\bGST\s*/?\s*HST", r"\bG\.?\s*S\.?\s*T\.?"]),
        ),
        (
            "gross_income_raw",
            AmountExtractor("gross_income_raw", _GROSS_PAY, skip_zero=True),
        ),
        ("reimbursements", AmountExtractor("reimbursements", [r"REIMBURSEMENTS?"])),
        ("net_income", AmountExtractor("net_income", _NET_PAY)),
        ("deductions", AmountExtractor("deductions", [r"DEDUCTIONS?"])),
        (
            "employer_or_production",
            TextExtractor(
                "employer_or_production",
                [r"CONTROLLING\s+EMPLOYER"],
                stops=[r"RESIDENT\s+OF\s+BRITISH"],
            ),
        ),
        ("insurance", AmountExtractor("insurance", [r"INS\.\s*DED"])),
        ("dues", AmountExtractor("dues", [r"(?:MEMBER|PERMIT)\s+FEE", r"\bDUES\b"])),
        ("pension", AmountExtractor("pension", [r"RETIR\.\s+EMP"])),
        ("retirement", AmountExtractor("retirement", [r"RETIRE\s+DED(?:UCT)?"])),
    ),
    derivation=GrossDerivation.ADD_REIMBURSEMENTS,
)

PAYSTUB_PROFILES: dict[LayoutTag, ExtractionProfile | CompositeProfile] = {
    LayoutTag.ENTERTAINMENT_PARTNERS: ENTERTAINMENT_PARTNERS_PROFILE,
    LayoutTag.CAST_AND_CREW: CAST_AND_CREW_PROFILE,
    LayoutTag.UNKNOWN: CompositeProfile(
        name=LayoutTag.UNKNOWN.value,
        profiles=(ENTERTAINMENT_PARTNERS_PROFILE, CAST_AND_CREW_PROFILE),
    ),
}

RECEIPT_LABEL_LINES: Sequence[str] = (
    r"\d",
    r"\$",
    r"TOTAL",
    r"SUB",
    r"GST",
    r"HST",
)

RECEIPT_TOTAL_ANCHORS: Sequence[str] = (
    r"\bGRAND\s+TOTAL\b",
    r"\bTOTAL\b",
    r"\bAMOUNT\s+DUE\b",
    r"\bBALANCE\s+DUE\b",
    r"\bAMOUNT\b",
    r"\bBALANCE\b",
    r"\bDUE\b",
    r"\bCHARGE\b",
    r"\bCAD\b",
    r"\bUSD\b",
    r"\bC\$",
)

RECEIPT_TAX_ANCHORS: Sequence[str] = (
    r"\bGST\s*/\s*HST\b",
    r"\bG/HST\b",
    r"\bGST\b",
    r"\bHST\b",
    r"\bTAX\b",
)


def build_receipt_profile(config: NormalizationConfig | None = None) -> ExtractionProfile:
    """Create the single receipt profile, sized by ``config``'s windows."""
    config = config or NormalizationConfig()
    return ExtractionProfile(
        name="receipt",
        rules=(
            (
                "vendor",
                LeadingLineExtractor(
                    "vendor",
                    max_lines=config.name_scan_lines,
                    min_length=config.name_min_length,
                    max_length=config.name_max_length,
                    label_patterns=RECEIPT_LABEL_LINES,
                ),
            ),
            ("date", DateExtractor("date", ())),
            (
                "total",
                AmountExtractor(
                    "total",
                    RECEIPT_TOTAL_ANCHORS,
                    skip_zero=True,
                    largest_fallback=True,
                ),
            ),
            (
                "tax_amount",
                AmountExtractor("tax_amount", RECEIPT_TAX_ANCHORS, skip_zero=True),
            ),
        ),
    )


def paystub_profile(layout: LayoutTag) -> ExtractionProfile | CompositeProfile:
    """Return the profile bound to ``layout``."""
    return PAYSTUB_PROFILES[layout]
