"""Reconciliation of text-derived fields with provider structured fields.

The provider's structured output is known to mislabel fields on
multi-template documents, so a value matched in the transcript always wins.
Structured fields only fill what text extraction left undetermined.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from crewbooks_ocr.normalization.values import ZERO, parse_amount, parse_date
from crewbooks_ocr.utils.logger import get_logger

from .records import DocumentKind

logger = get_logger(__name__)

AMOUNT = "amount"
DATE = "date"
TEXT = "text"

# Canonical field -> (value kind, alternate structured keys in priority order).
# Dotted keys address nested objects, e.g. "vendor.name".
STRUCTURED_KEYS: dict[DocumentKind, dict[str, tuple[str, tuple[str, ...]]]] = {
    DocumentKind.RECEIPT: {
        "vendor": (TEXT, ("vendor.name", "vendor.raw_name", "vendor")),
        "date": (DATE, ("date",)),
        "total": (AMOUNT, ("total",)),
        "tax_amount": (AMOUNT, ("tax", "gst")),
    },
    DocumentKind.PAYSTUB: {
        "date": (DATE, ("date", "pay_period", "period")),
        "tax_amount": (AMOUNT, ("tax", "gst")),
        "gross_income_raw": (AMOUNT, ("gross_pay", "gross", "total")),
        "gross_income_net": (AMOUNT, ("gross_pay", "gross", "total")),
        "net_income": (AMOUNT, ("net_pay", "net")),
        "deductions": (AMOUNT, ("deductions.total", "deductions")),
        "employer_or_production": (
            TEXT,
            ("employer.name", "employer.raw_name", "employer", "company_name"),
        ),
    },
}

# Fields that may instead be summed from component amounts.
COMPONENT_SUMS: dict[DocumentKind, dict[str, tuple[str, ...]]] = {
    DocumentKind.RECEIPT: {},
    DocumentKind.PAYSTUB: {
        "deductions": ("deductions.cpp", "deductions.ei", "deductions.income_tax"),
    },
}


def lookup(structured: Mapping[str, Any], dotted_key: str) -> Any:
    """Resolve a dotted key against nested mappings, ``None`` when missing."""
    current: Any = structured
    for part in dotted_key.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def _normalize(kind: str, value: Any) -> Any:
    if kind == AMOUNT:
        return parse_amount(value)
    if kind == DATE:
        return parse_date(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


class StructuredFieldReconciler:
    """Fills gaps in a text-extracted field set from structured fields.

    Args:
        document_kind: Selects the table of alternate structured keys.
    """

    def __init__(self, document_kind: DocumentKind) -> None:
        self.document_kind = document_kind
        self.keys = STRUCTURED_KEYS[document_kind]
        self.component_sums = COMPONENT_SUMS[document_kind]

    def structured_value(self, structured: Mapping[str, Any], field_name: str) -> Any:
        """Return the normalized structured value for one canonical field.

        Falsy provider values (``0``, ``""``, ``null``) count as not
        provided, as the provider reports missing numbers as zero.
        """
        kind, keys = self.keys[field_name]
        for key in keys:
            raw = lookup(structured, key)
            if not raw:
                continue
            value = _normalize(kind, raw)
            if value is not None:
                return value
            logger.debug("Structured %s=%r did not normalize", key, raw)

        components = self.component_sums.get(field_name)
        if components:
            return self._sum_components(structured, components)
        return None

    @staticmethod
    def _sum_components(
        structured: Mapping[str, Any], components: tuple[str, ...]
    ) -> Decimal | None:
        amounts = [parse_amount(lookup(structured, key)) for key in components]
        present = [a for a in amounts if a is not None]
        if not present:
            return None
        total = sum(present, ZERO)
        return total if total > ZERO else None

    def merge(
        self, text_fields: Mapping[str, Any], structured: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Combine text-derived and structured values.

        Args:
            text_fields: Fields produced by an extraction profile.
            structured: Provider structured fields, possibly empty.

        Returns:
            New mapping holding every text value unchanged plus any
            structured value for fields the text left undetermined.
        """
        merged = dict(text_fields)
        filled: list[str] = []
        for field_name in self.keys:
            if merged.get(field_name) is not None:
                continue
            value = self.structured_value(structured, field_name)
            if value is not None:
                merged[field_name] = value
                filled.append(field_name)

        if filled:
            logger.debug("Filled %s from structured fields", ", ".join(filled))
        return merged
