"""
Extraction Module for Invoice OCR.

This module recovers invoice header fields from raw OCR text using
keyword tiers, label anchors and name-plausibility scoring.

Features:
    - Invoice number and ABN pattern matching
    - Customer vs supplier block separation
    - Issue and due date detection, including Net payment terms
    - Invoice total selection by keyword priority
    - Calibrated 0-100 confidence per field
    - Threshold-gated form prefill values

Author: ML Engineering Team
"""

from .result import OcrField, ParsedValue, InvoiceOcrResult, InvoiceFormPrefillValues
from .parser import InvoiceTextParser, parse_invoice_text
from .prefill import to_prefill_values, to_invoice_form_prefill_values

__all__ = [
    'OcrField',
    'ParsedValue',
    'InvoiceOcrResult',
    'InvoiceFormPrefillValues',
    'InvoiceTextParser',
    'parse_invoice_text',
    'to_prefill_values',
    'to_invoice_form_prefill_values',
]
