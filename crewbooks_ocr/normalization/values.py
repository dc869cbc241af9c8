"""Normalization of raw amount and date substrings.

Both normalizers are total: any input they cannot interpret yields ``None``
instead of raising, so a malformed OCR token only ever costs one field.
"""

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from crewbooks_ocr.utils.logger import get_logger

logger = get_logger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}
_MONTH_NAME = r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?"

# Regex fragments for locating tokens inside a transcript.
AMOUNT_TOKEN = r"\d[\d,]*(?:\.\d+)?"
DATE_TOKEN = (
    r"\d{4}[/\-]\d{1,2}[/\-]\d{1,2}"
    r"|\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}"
    r"|\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{2,4}"
)

_CURRENCY_PREFIX = re.compile(r"^(?:CA\$|C\$|CAD|USD|\$)\s*", re.IGNORECASE)
_CURRENCY_SUFFIX = re.compile(r"\s*(?:CAD|USD)$", re.IGNORECASE)
_AMOUNT_LITERAL = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$")

# A date may be followed by a time part, e.g. "2024-03-15 10:22:00".
_TIME_TAIL = r"(?:[T\s].*)?$"
_DATE_FORMS: list[tuple[re.Pattern[str], tuple[str, str, str]]] = [
    (
        re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})" + _TIME_TAIL),
        ("year", "month", "day"),
    ),
    (
        re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4}|\d{2})" + _TIME_TAIL),
        ("month", "day", "year"),
    ),
    (
        re.compile(r"^(\d{1,2})\s+" + _MONTH_NAME + r",?\s+(\d{4}|\d{2})\b", re.I),
        ("day", "month", "year"),
    ),
    (
        re.compile(r"^" + _MONTH_NAME + r"\s+(\d{1,2}),?\s+(\d{4}|\d{2})\b", re.I),
        ("month", "day", "year"),
    ),
]


def parse_amount(value: str | int | float | Decimal | None) -> Decimal | None:
    """Convert a raw monetary token into a two-decimal ``Decimal``.

    Thousands separators and a leading currency marker (``$``, ``C$``,
    ``CAD``, ``USD``) are stripped. Negative, non-finite and non-numeric
    inputs are rejected.

    Args:
        value: Token captured from a transcript, or a number taken from
            the provider's structured fields.

    Returns:
        The amount rounded half-up to cents, or ``None``.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        literal = str(value)
    elif isinstance(value, str):
        cleaned = _CURRENCY_PREFIX.sub("", value.strip())
        cleaned = _CURRENCY_SUFFIX.sub("", cleaned).replace(",", "").strip()
        if not _AMOUNT_LITERAL.match(cleaned):
            return None
        literal = cleaned
    else:
        return None

    try:
        amount = Decimal(literal)
        if not amount.is_finite() or amount < 0:
            return None
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        logger.debug("Rejected amount token %r", value)
        return None


def _expand_year(raw: str) -> int:
    year = int(raw)
    if len(raw) == 2:
        year += 2000 if year < 69 else 1900
    return year


def parse_date(value: str | date | None) -> str | None:
    """Convert a raw date token into an ISO ``YYYY-MM-DD`` string.

    Accepted forms are ``M/D/Y`` (``/`` or ``-``, two- or four-digit
    year), ``Y-M-D``, ``D Mon Y`` and ``Mon D, Y``. A trailing time part is
    ignored. The components must form a real calendar date.
    """
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if not isinstance(value, str):
        return None

    text = value.strip()
    for pattern, order in _DATE_FORMS:
        match = pattern.match(text)
        if not match:
            continue
        parts = dict(zip(order, match.groups()))
        month_raw = parts["month"]
        month = (
            int(month_raw) if month_raw.isdigit() else _MONTHS[month_raw[:3].lower()]
        )
        try:
            return date(_expand_year(parts["year"]), month, int(parts["day"])).isoformat()
        except ValueError:
            logger.debug("Rejected date token %r", value)
            return None
    return None
