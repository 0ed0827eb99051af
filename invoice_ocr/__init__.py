"""
Invoice OCR Engine.

Recovers invoice header fields (invoice number, customer name, ABN, issue
date, due date, total amount) from noisy OCR text, each with a 0-100
confidence, and projects them onto form prefill values.

Usage:
    from invoice_ocr import parse_invoice_text, extract_from_source, to_prefill_values

    result = parse_invoice_text(ocr_text, base_confidence=82)
    values = to_prefill_values(result, threshold=80)

Author: ML Engineering Team
Version: 1.0.0
"""

from .extraction import (
    OcrField,
    InvoiceOcrResult,
    InvoiceFormPrefillValues,
    InvoiceTextParser,
    parse_invoice_text,
    to_prefill_values,
    to_invoice_form_prefill_values,
)
from .pipeline import InvoiceOcrPipeline, extract_from_source

__version__ = "1.0.0"

__all__ = [
    'OcrField',
    'InvoiceOcrResult',
    'InvoiceFormPrefillValues',
    'InvoiceTextParser',
    'InvoiceOcrPipeline',
    'parse_invoice_text',
    'extract_from_source',
    'to_prefill_values',
    'to_invoice_form_prefill_values',
]
