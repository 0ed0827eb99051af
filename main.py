#!/usr/bin/env python3
"""
Invoice OCR Engine - Main Entry Point.

Command-line interface for extracting invoice header fields from PDFs,
images and plain-text OCR output.

Usage:
    Command Line:
        python main.py --input invoice.pdf
        python main.py --input ./invoices/ --output outputs/results.json --prefill

    Python:
        from main import run_extraction
        results = run_extraction("invoice.pdf")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import ConfigurationManager, get_config
from invoice_ocr.utils.logger import LOGGER_NAMESPACE, setup_logger_from_config, get_logger
from invoice_ocr.utils.helpers import collect_files, ensure_directory
from invoice_ocr.utils.exceptions import InputFileNotFoundError, UnsupportedFileTypeError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice OCR field extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single invoice:
        python main.py --input invoice.pdf

    Process directory and save prefill values:
        python main.py --input ./invoices/ --output outputs/results.json --prefill

    Parse already-recognised text with a known OCR confidence:
        python main.py --input scan.txt --base-confidence 88
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file or directory containing invoices"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default="outputs/extraction_results.json",
        help="JSON output file (default: outputs/extraction_results.json)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--threshold", "-t",
        type=float,
        default=None,
        help="Prefill confidence threshold (default: extraction.prefill_threshold)"
    )

    parser.add_argument(
        "--base-confidence",
        type=float,
        default=None,
        help="Base confidence for .txt inputs (default: extraction.fallback_base_confidence)"
    )

    parser.add_argument(
        "--prefill",
        action="store_true",
        help="Include threshold-filtered prefill values in the output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Load configuration and set up logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    if args.config:
        ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = None
    if level is not None:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    logger.info("=" * 60)
    logger.info("INVOICE OCR FIELD EXTRACTION")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output}")

    return config


def validate_inputs(input_path: str) -> List[Path]:
    """
    Resolve the input argument to a list of files to process.

    Raises:
        InputFileNotFoundError: If the input path doesn't exist.
        UnsupportedFileTypeError: If a single input file has an unsupported extension.
    """
    logger = get_logger(__name__)
    path = Path(input_path)
    supported_extensions = get_config("input.supported_extensions", [])

    if not path.exists():
        raise InputFileNotFoundError(str(path))

    if path.is_file():
        if path.suffix.lower() not in supported_extensions:
            raise UnsupportedFileTypeError(path.suffix.lower(), supported_extensions)
        return [path]

    files = collect_files(path, supported_extensions)
    if files:
        logger.info(f"Found {len(files)} files to process")
    else:
        logger.warning(f"No supported files found in: {path}")
    return files


async def _extract_file(
    file_path: Path,
    threshold: float,
    base_confidence: Optional[float],
    include_prefill: bool
) -> Dict[str, Any]:
    from invoice_ocr import extract_from_source, parse_invoice_text, to_prefill_values

    if base_confidence is not None and file_path.suffix.lower() == '.txt':
        text = file_path.read_text(encoding='utf-8-sig', errors='replace')
        result = parse_invoice_text(text, base_confidence)
    else:
        result = await extract_from_source(file_path)

    record: Dict[str, Any] = {
        'source_file': str(file_path),
        'fields': result.to_dict(),
        'average_confidence': round(result.average_confidence, 2),
        'missing_fields': result.missing_fields,
    }
    if include_prefill:
        record['prefill'] = to_prefill_values(result, threshold).to_dict()
    return record


def run_extraction(
    input_path: str,
    threshold: Optional[float] = None,
    base_confidence: Optional[float] = None,
    include_prefill: bool = False
) -> List[Dict[str, Any]]:
    """
    Run extraction over a file or directory.

    Files are processed one after another; a file that cannot be read
    still produces a record, with every field empty.

    Returns:
        One result dictionary per input file.

    Example:
        >>> results = run_extraction("invoices/", include_prefill=True)
        >>> for r in results:
        ...     print(r['prefill']['invoice_number'])
    """
    logger = get_logger(__name__)

    if threshold is None:
        threshold = get_config("extraction.prefill_threshold", 80)

    files = validate_inputs(input_path)
    logger.info(f"Processing {len(files)} files...")

    async def _run_all() -> List[Dict[str, Any]]:
        records = []
        for file_path in files:
            logger.info(f"Processing: {file_path.name}")
            record = await _extract_file(file_path, threshold, base_confidence, include_prefill)
            fields = record['fields']
            logger.info(
                f"  Extracted: Invoice #{fields['invoice_number']['value'] or 'N/A'}, "
                f"Customer: {fields['customer_name']['value'] or 'N/A'}, "
                f"Amount: {fields['invoice_amount']['value'] or 'N/A'}, "
                f"Confidence: {record['average_confidence']:.2f}"
            )
            records.append(record)
        return records

    return asyncio.run(_run_all())


def write_results(results: List[Dict[str, Any]], output: str) -> None:
    payload = json.dumps(results, indent=2)
    output_path = Path(output)
    ensure_directory(output_path.parent)
    output_path.write_text(payload + "\n", encoding='utf-8')
    get_logger(__name__).info(f"JSON output: {output_path}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, 1 for errors, 130 if interrupted).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        results = run_extraction(
            input_path=args.input,
            threshold=args.threshold,
            base_confidence=args.base_confidence,
            include_prefill=args.prefill
        )

        if not results:
            logger.error("No files to process")
            return 1

        write_results(results, args.output)

        logger.info("=" * 60)
        logger.info(f"Extraction complete. Processed {len(results)} files.")
        logger.info("=" * 60)

        return 0

    except (InputFileNotFoundError, UnsupportedFileTypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if logging.getLogger(LOGGER_NAMESPACE).isEnabledFor(logging.DEBUG):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
