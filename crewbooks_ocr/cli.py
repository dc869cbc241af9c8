"""Command-line interface for normalizing saved OCR provider responses.

Provides subcommands for normalizing a single provider response JSON file
and for normalizing a folder of them into one CSV.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

from crewbooks_ocr.extraction.pipeline import DocumentNormalizer
from crewbooks_ocr.extraction.records import (
    DocumentKind,
    InvalidPayloadError,
    RawOcrPayload,
)
from crewbooks_ocr.utils.config import load_config
from crewbooks_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_META_COLUMNS = [
    "filename",
    "status",
    "layout",
    "populated_fields",
    "error",
]


def _find_responses(input_dir: Path) -> list[Path]:
    """Find all provider response JSON files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of JSON file paths.
    """
    return sorted(set(input_dir.glob("*.json")) | set(input_dir.glob("*.JSON")))


def _load_payload(file_path: Path, document_kind: str) -> RawOcrPayload:
    """Read a saved provider response into a payload.

    Raises:
        InvalidPayloadError: If the file cannot be read as UTF-8 or does
            not hold a JSON object.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidPayloadError(f"Cannot read {file_path.name}: {exc}") from exc
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise InvalidPayloadError(f"{file_path.name} is not valid JSON: {exc}") from exc
    return RawOcrPayload.from_provider_response(document_kind, data)


def normalize_file(
    file_path: Path,
    document_kind: str,
    normalizer: DocumentNormalizer | None = None,
) -> dict[str, object]:
    """Normalize one saved provider response.

    Args:
        file_path: Path to the provider response JSON.
        document_kind: ``receipt`` or ``paystub``.
        normalizer: Normalizer to reuse; built from config when omitted.

    Returns:
        Dictionary with filename, layout and the canonical record.
    """
    if normalizer is None:
        normalizer = DocumentNormalizer(load_config().normalization)

    record = normalizer.normalize(_load_payload(file_path, document_kind))
    layout = getattr(record, "layout", None)
    return {
        "filename": file_path.name,
        "document_kind": document_kind,
        "layout": layout.value if layout else None,
        "record": record.to_dict(),
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    document_kind: str = "receipt",
    verbose: bool = False,
) -> dict[str, int]:
    """Normalize every provider response in a folder and export to CSV.

    Args:
        input_dir: Directory containing provider response JSON files.
        output_csv: Path for the output CSV file.
        document_kind: Kind applied to every file in the folder.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    normalizer = DocumentNormalizer(load_config().normalization)

    files = _find_responses(input_dir)
    if not files:
        logger.warning("No provider responses found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d provider responses to normalize", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Normalizing [{i}/{len(files)}]: {file_path.name}")

        try:
            result = normalize_file(file_path, document_kind, normalizer)
        except InvalidPayloadError as exc:
            logger.error("Failed to normalize %s: %s", file_path.name, exc)
            rows.append({"filename": file_path.name, "status": "failed", "error": str(exc)})
            failed += 1
            continue

        record = result["record"]
        row: dict[str, object] = {
            "filename": file_path.name,
            "status": "success",
            "layout": result["layout"],
            "populated_fields": len(record),
            "error": None,
        }
        row.update(record)
        rows.append(row)
        successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write normalized records to a CSV file.

    Args:
        rows: List of row dictionaries.
        output_path: Path for the output CSV file.
    """
    if not rows:
        return

    all_keys: set[str] = set()
    for r in rows:
        all_keys.update(r.keys())

    field_columns = sorted(all_keys - set(_META_COLUMNS))
    columns = [c for c in _META_COLUMNS if c in all_keys] + field_columns

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Normalization Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    kinds = [k.value for k in DocumentKind]
    parser = argparse.ArgumentParser(
        description="CrewBooks OCR normalizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser(
        "normalize", help="Normalize a saved provider response"
    )
    single_parser.add_argument("file", type=Path, help="Provider response JSON file")
    single_parser.add_argument(
        "-k",
        "--kind",
        choices=kinds,
        default="receipt",
        dest="document_kind",
        help="Document kind (default: receipt)",
    )
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser(
        "batch", help="Normalize a folder of provider responses"
    )
    batch_parser.add_argument(
        "input_dir", type=Path, help="Directory with provider response JSON files"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-k",
        "--kind",
        choices=kinds,
        default="receipt",
        dest="document_kind",
        help="Document kind (default: receipt)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    setup_logging(load_config().log_level)

    if args.command == "normalize":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = normalize_file(args.file, args.document_kind)
        except InvalidPayloadError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir,
            args.output,
            args.document_kind,
            args.verbose,
        )
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
