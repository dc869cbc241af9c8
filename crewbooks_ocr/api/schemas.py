"""Pydantic request/response schemas for the FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from crewbooks_ocr.extraction.records import DocumentKind


class NormalizeRequest(BaseModel):
    """Provider output for one uploaded document."""

    document_kind: DocumentKind
    structured_fields: dict[str, Any] | None = Field(default_factory=dict)
    raw_text: str | None = None


class NormalizeResponse(BaseModel):
    """Canonical record produced for one document."""

    success: bool
    document_kind: DocumentKind
    layout: str | None = None
    record: dict[str, Any]
    populated_fields: list[str]
    processing_time_ms: float


class LayoutInfo(BaseModel):
    """A paystub layout the classifier can recognize."""

    name: str
    description: str
    identifying_phrases: list[list[str]]
    supported_fields: list[str]


class LayoutsResponse(BaseModel):
    """Response schema listing known paystub layouts."""

    layouts: list[LayoutInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
