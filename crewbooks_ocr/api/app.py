"""FastAPI application exposing the OCR normalization pipeline.

The upload, persistence and authentication layers call this service with
the provider's output and use the returned record to pre-fill a form.
"""

import time

from fastapi import FastAPI, HTTPException

from crewbooks_ocr import __version__
from crewbooks_ocr.extraction.pipeline import DocumentNormalizer
from crewbooks_ocr.extraction.profiles import PAYSTUB_PROFILES
from crewbooks_ocr.extraction.records import InvalidPayloadError, RawOcrPayload
from crewbooks_ocr.utils.config import load_config
from crewbooks_ocr.utils.logger import get_logger

from .schemas import (
    HealthResponse,
    LayoutInfo,
    LayoutsResponse,
    NormalizeRequest,
    NormalizeResponse,
)

logger = get_logger(__name__)

app = FastAPI(
    title="CrewBooks OCR Normalization API",
    description="Normalize OCR provider output for receipts and paystubs",
    version=__version__,
)

_LAYOUT_DESCRIPTIONS = {
    "entertainment_partners": "Entertainment Partners paystub",
    "cast_and_crew": "Cast and Crew paystub",
}


def _get_normalizer() -> DocumentNormalizer:
    """Build a normalizer from the current configuration."""
    config = load_config()
    return DocumentNormalizer(config.normalization)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service health status."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/normalize", response_model=NormalizeResponse)
async def normalize(request: NormalizeRequest) -> NormalizeResponse:
    """Normalize provider output into a canonical record.

    Args:
        request: Document kind, structured fields and raw transcript.

    Returns:
        The canonical record with its populated field names.
    """
    start_time = time.time()

    try:
        payload = RawOcrPayload(
            document_kind=request.document_kind,
            structured_fields=request.structured_fields,
            raw_text=request.raw_text,
        )
    except InvalidPayloadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    record = _get_normalizer().normalize(payload)
    layout = getattr(record, "layout", None)

    return NormalizeResponse(
        success=not record.is_empty(),
        document_kind=payload.document_kind,
        layout=layout.value if layout else None,
        record=record.to_dict(),
        populated_fields=record.populated_fields(),
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/layouts", response_model=LayoutsResponse)
async def list_layouts() -> LayoutsResponse:
    """List the paystub layouts the configured classifier recognizes."""
    layouts = []
    for tag, rules in _get_normalizer().classifier.rules.items():
        profile = PAYSTUB_PROFILES[tag]
        layouts.append(
            LayoutInfo(
                name=tag.value,
                description=_LAYOUT_DESCRIPTIONS.get(tag.value, tag.value),
                identifying_phrases=[list(rule.all_of) for rule in rules],
                supported_fields=[name for name, _ in profile.rules]
                + ["gross_income_net"],
            )
        )
    return LayoutsResponse(layouts=layouts)
