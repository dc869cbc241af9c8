"""Input payload and canonical output records of the normalization pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import StrEnum
from typing import Any


class InvalidPayloadError(ValueError):
    """Raised when the caller hands the pipeline a malformed payload.

    This signals a programming error in the caller, not poor OCR quality.
    """


class DocumentKind(StrEnum):
    """Kinds of uploaded documents the pipeline understands."""

    RECEIPT = "receipt"
    PAYSTUB = "paystub"

    @classmethod
    def coerce(cls, value: Any) -> "DocumentKind":
        """Return the member for ``value`` or raise :class:`InvalidPayloadError`."""
        try:
            return cls(value)
        except ValueError:
            raise InvalidPayloadError(f"Unsupported document kind: {value!r}") from None


class LayoutTag(StrEnum):
    """Known paystub layouts, named after the payroll service that issues them."""

    ENTERTAINMENT_PARTNERS = "entertainment_partners"
    CAST_AND_CREW = "cast_and_crew"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawOcrPayload:
    """What the OCR provider returned for one uploaded document.

    ``structured_fields`` may be ``None`` (treated as empty) but must
    otherwise be a mapping; ``raw_text`` may be absent.
    """

    document_kind: DocumentKind
    structured_fields: Mapping[str, Any] = field(default_factory=dict)
    raw_text: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "document_kind", DocumentKind.coerce(self.document_kind))

        if self.structured_fields is None:
            object.__setattr__(self, "structured_fields", {})
        elif not isinstance(self.structured_fields, Mapping):
            raise InvalidPayloadError(
                "structured_fields must be an object, got "
                f"{type(self.structured_fields).__name__}"
            )

        if self.raw_text is not None and not isinstance(self.raw_text, str):
            raise InvalidPayloadError(
                f"raw_text must be a string, got {type(self.raw_text).__name__}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawOcrPayload":
        """Build a payload from a JSON object in camelCase or snake_case.

        Args:
            data: Object with ``documentKind``, ``structuredFields`` and
                ``rawText`` (or their snake_case spellings).

        Returns:
            Validated payload.
        """
        if not isinstance(data, Mapping):
            raise InvalidPayloadError(f"Payload must be an object, got {type(data).__name__}")

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data:
                    return data[key]
            return None

        return cls(
            document_kind=pick("documentKind", "document_kind"),
            structured_fields=pick("structuredFields", "structured_fields"),
            raw_text=pick("rawText", "raw_text"),
        )

    @classmethod
    def from_provider_response(
        cls, document_kind: DocumentKind | str, response: Mapping[str, Any]
    ) -> "RawOcrPayload":
        """Split a saved provider document response into a payload.

        The provider puts the full transcript under ``ocr_text`` next to its
        structured fields.
        """
        if not isinstance(response, Mapping):
            raise InvalidPayloadError(
                f"Provider response must be an object, got {type(response).__name__}"
            )
        structured = {k: v for k, v in response.items() if k != "ocr_text"}
        return cls(
            document_kind=document_kind,
            structured_fields=structured,
            raw_text=response.get("ocr_text"),
        )


def _serialize(value: Any) -> Any:
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, StrEnum):
        return value.value
    return value


@dataclass
class _CanonicalRecord:
    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-ready view of the record with absent fields omitted."""
        return {
            f.name: _serialize(getattr(self, f.name))
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def populated_fields(self) -> list[str]:
        """Names of the fields that hold a value, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.populated_fields()


@dataclass
class ReceiptRecord(_CanonicalRecord):
    """Best-effort receipt fields; ``None`` means "could not determine"."""

    vendor: str | None = None
    date: str | None = None
    total: Decimal | None = None
    tax_amount: Decimal | None = None


@dataclass
class PaystubRecord(_CanonicalRecord):
    """Best-effort paystub fields; ``None`` means "could not determine".

    ``gross_income_net`` is derived from ``gross_income_raw`` by a
    layout-specific rule rather than read from the transcript.
    """

    layout: LayoutTag | None = None
    date: str | None = None
    tax_amount: Decimal | None = None
    gross_income_raw: Decimal | None = None
    gross_income_net: Decimal | None = None
    net_income: Decimal | None = None
    deductions: Decimal | None = None
    reimbursements: Decimal | None = None
    employer_or_production: str | None = None
    insurance: Decimal | None = None
    dues: Decimal | None = None
    pension: Decimal | None = None
    retirement: Decimal | None = None


RECORD_TYPES: dict[DocumentKind, type[_CanonicalRecord]] = {
    DocumentKind.RECEIPT: ReceiptRecord,
    DocumentKind.PAYSTUB: PaystubRecord,
}
