"""
Invoice Text Parser Module.

This module provides the InvoiceTextParser class that runs every field
extractor over one block of OCR text and calibrates the results.

Operations:
    - Invoice number and ABN (base confidence + fixed bonus)
    - Customer name, issue date, due date, amount (tiered confidence)
    - Due date receives the issue date found in the same text

The parser holds no state between calls and never raises for malformed
text; a field that cannot be found is returned empty with confidence 0.

Author: ML Engineering Team
"""

from typing import Optional

from invoice_ocr.utils.logger import get_logger
from .amounts import find_amount_value
from .confidence import DEFAULT_BASE_CONFIDENCE, calibrate, to_field
from .customer import find_customer_name
from .dates import find_due_date_value, find_issue_date_value
from .identifiers import ABN_BONUS, INVOICE_NUMBER_BONUS, find_abn, find_invoice_number
from .result import InvoiceOcrResult, OcrField

# Initialize module logger
logger = get_logger(__name__)


class InvoiceTextParser:
    """
    Heuristic field extractor for raw invoice OCR text.

    Example:
        >>> parser = InvoiceTextParser()
        >>> result = parser.parse(ocr_text, base_confidence=82)
        >>> print(result.customer_name.value)
        >>> print(result.invoice_amount.confidence)
    """

    def parse(
        self,
        text: Optional[str],
        base_confidence: float = DEFAULT_BASE_CONFIDENCE
    ) -> InvoiceOcrResult:
        """
        Extract all invoice fields from text.

        Args:
            text: Raw OCR text. None is treated as empty text.
            base_confidence: Overall recognition confidence of the text (0-100).

        Returns:
            A new InvoiceOcrResult; invoice_status is always empty.
        """
        text = text or ''
        base = float(base_confidence)

        invoice_number = find_invoice_number(text)
        customer_abn = find_abn(text)
        customer_name = find_customer_name(text)
        issue_date = find_issue_date_value(text)
        due_date = find_due_date_value(text, issue_date.value)
        amount = find_amount_value(text)

        result = InvoiceOcrResult(
            invoice_number=to_field(invoice_number, base + INVOICE_NUMBER_BONUS),
            customer_name=to_field(customer_name.value, calibrate(base, customer_name.confidence)),
            customer_abn=to_field(customer_abn, base + ABN_BONUS),
            issue_date=to_field(issue_date.value, calibrate(base, issue_date.confidence)),
            due_date=to_field(due_date.value, calibrate(base, due_date.confidence)),
            invoice_amount=to_field(amount.value, calibrate(base, amount.confidence)),
            invoice_status=OcrField(),
        )

        self._log_summary(result, base)
        return result

    def _log_summary(self, result: InvoiceOcrResult, base: float) -> None:
        for name in InvoiceOcrResult.EXTRACTED_FIELD_NAMES:
            field = getattr(result, name)
            logger.debug(f"  {name}: {field.value!r} ({field.confidence:.0f})")

        if result.missing_fields:
            logger.debug(f"Missing fields: {', '.join(result.missing_fields)}")

        logger.info(
            f"Parsed {len(result.extracted_fields)}/{len(InvoiceOcrResult.EXTRACTED_FIELD_NAMES)} "
            f"fields at base confidence {base:.0f}"
        )


def parse_invoice_text(
    text: Optional[str],
    base_confidence: float = DEFAULT_BASE_CONFIDENCE
) -> InvoiceOcrResult:
    """
    Parse invoice OCR text into calibrated fields.

    Example:
        >>> result = parse_invoice_text("Invoice No: INV-1001", base_confidence=75)
        >>> result.invoice_number.value
        'INV-1001'
    """
    return InvoiceTextParser().parse(text, base_confidence)
