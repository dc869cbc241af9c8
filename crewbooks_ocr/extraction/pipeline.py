"""OCR normalization pipeline.

Classifies paystubs by layout, runs the matching extraction profile over
the raw transcript, then fills remaining gaps from the provider's
structured fields and derives net gross income from the merged figures.
The pipeline keeps no state between calls, so one instance can serve any
number of documents concurrently.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from crewbooks_ocr.utils.config import NormalizationConfig
from crewbooks_ocr.utils.logger import get_logger

from .layout_classifier import LayoutClassifier
from .profiles import (
    CompositeProfile,
    ExtractionProfile,
    build_receipt_profile,
    paystub_profile,
)
from .reconcile import StructuredFieldReconciler
from .records import (
    DocumentKind,
    LayoutTag,
    PaystubRecord,
    RawOcrPayload,
    ReceiptRecord,
)

logger = get_logger(__name__)


class DocumentNormalizer:
    """Produces canonical records from OCR provider output.

    Args:
        config: Heuristic windows and the optional layouts file.
    """

    def __init__(self, config: NormalizationConfig | None = None) -> None:
        self.config = config or NormalizationConfig()
        self.classifier = LayoutClassifier(
            Path(self.config.layouts_path),
            scan_lines=self.config.classifier_scan_lines,
        )
        self.receipt_profile = build_receipt_profile(self.config)
        self.reconcilers = {
            kind: StructuredFieldReconciler(kind) for kind in DocumentKind
        }

    def normalize(self, payload: RawOcrPayload) -> ReceiptRecord | PaystubRecord:
        """Normalize one document.

        Args:
            payload: Provider output for the document.

        Returns:
            The canonical record. It may be empty, which tells the caller
            to ask the user for manual entry.
        """
        layout: LayoutTag | None = None
        profile: ExtractionProfile | CompositeProfile | None = None
        text_fields: dict[str, Any] = {}
        if payload.document_kind is DocumentKind.PAYSTUB:
            # Without a transcript there is nothing to classify.
            if payload.raw_text:
                layout = self.classifier.classify(payload.raw_text)
                profile = paystub_profile(layout)
                text_fields = profile.run(payload.raw_text)
        else:
            text_fields = self.receipt_profile.run(payload.raw_text)

        reconciler = self.reconcilers[payload.document_kind]
        fields = reconciler.merge(text_fields, payload.structured_fields)

        if profile is not None:
            # Net gross always follows the layout rule over the merged figures.
            fields.pop("gross_income_net", None)
            net = profile.derive(fields)
            if net is not None:
                fields["gross_income_net"] = net

        record: ReceiptRecord | PaystubRecord
        if payload.document_kind is DocumentKind.PAYSTUB:
            record = PaystubRecord(layout=layout, **fields)
        else:
            record = ReceiptRecord(**fields)

        logger.info(
            "Normalized %s (layout=%s): %d fields from text, %d total",
            payload.document_kind.value,
            layout.value if layout else "-",
            len(text_fields),
            len(fields),
        )
        return record


def normalize_document(
    document_kind: DocumentKind | str,
    structured_fields: Mapping[str, Any] | None = None,
    raw_text: str | None = None,
    config: NormalizationConfig | None = None,
) -> ReceiptRecord | PaystubRecord:
    """Normalize a single document without managing a normalizer.

    Raises:
        InvalidPayloadError: If the kind is not recognized or the inputs
            have the wrong shape.
    """
    payload = RawOcrPayload(
        document_kind=document_kind,
        structured_fields=structured_fields,
        raw_text=raw_text,
    )
    return DocumentNormalizer(config).normalize(payload)
