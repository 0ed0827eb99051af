"""
Extraction Result Data Classes.

This module defines the records produced by the invoice text parser.

Classes:
    OcrField: One extracted value with its calibrated confidence (0-100)
    ParsedValue: A single extractor's raw answer before calibration
    InvoiceOcrResult: The six extracted header fields plus invoice status
    InvoiceFormPrefillValues: Flat string values safe to auto-fill a form
"""

import json
from dataclasses import dataclass, fields as dataclass_fields
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class OcrField:
    """
    One extracted datum.

    Attributes:
        value: Extracted value, or None when nothing was found
        confidence: Calibrated confidence in [0, 100]; 0 exactly when value is None

    Example:
        >>> OcrField("INV-1001", 83)
        OcrField(value='INV-1001', confidence=83)
    """
    value: Optional[str] = None
    confidence: float = 0

    @property
    def is_empty(self) -> bool:
        return self.value is None

    def to_dict(self) -> Dict[str, Any]:
        return {'value': self.value, 'confidence': self.confidence}


@dataclass(frozen=True)
class ParsedValue:
    """
    A field extractor's own answer, before blending with OCR confidence.

    Attributes:
        value: Extracted value or None
        confidence: Extractor (tier) confidence, nominally 70-95
    """
    value: Optional[str] = None
    confidence: float = 0

    @classmethod
    def miss(cls) -> 'ParsedValue':
        return cls(None, 0)

    def __bool__(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class InvoiceOcrResult:
    """
    Fields recovered from one invoice.

    Created fresh for every parse call and never mutated afterwards.
    invoice_status is never inferred from OCR and is always empty.

    Example:
        >>> result = parse_invoice_text(text, base_confidence=82)
        >>> result.invoice_amount.value
        '2340.00'
        >>> print(result.to_json())
    """
    invoice_number: OcrField = OcrField()
    customer_name: OcrField = OcrField()
    customer_abn: OcrField = OcrField()
    issue_date: OcrField = OcrField()
    due_date: OcrField = OcrField()
    invoice_amount: OcrField = OcrField()
    invoice_status: OcrField = OcrField()

    # The extracted header fields, excluding the manual-only status
    EXTRACTED_FIELD_NAMES = (
        'invoice_number',
        'customer_name',
        'customer_abn',
        'issue_date',
        'due_date',
        'invoice_amount',
    )

    @classmethod
    def empty(cls) -> 'InvoiceOcrResult':
        """All fields empty with zero confidence."""
        return cls()

    @property
    def fields(self) -> Dict[str, OcrField]:
        """All fields, including invoice_status, keyed by name."""
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self)}

    @property
    def missing_fields(self) -> List[str]:
        """Names of extracted fields that have no value."""
        return [
            name for name in self.EXTRACTED_FIELD_NAMES
            if getattr(self, name).is_empty
        ]

    @property
    def extracted_fields(self) -> Dict[str, str]:
        """Only the fields that have values."""
        return {
            name: getattr(self, name).value
            for name in self.EXTRACTED_FIELD_NAMES
            if not getattr(self, name).is_empty
        }

    @property
    def average_confidence(self) -> float:
        """
        Average calibrated confidence across the fields that have values.

        Returns:
            Average confidence (0-100), 0 when nothing was extracted.
        """
        scores = [
            getattr(self, name).confidence
            for name in self.EXTRACTED_FIELD_NAMES
            if not getattr(self, name).is_empty
        ]
        if not scores:
            return 0.0
        return sum(scores) / len(scores)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: field.to_dict() for name, field in self.fields.items()}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"InvoiceOcrResult("
            f"invoice={self.invoice_number.value}, "
            f"customer={self.customer_name.value}, "
            f"amount={self.invoice_amount.value}, "
            f"fields={len(self.extracted_fields)}/{len(self.EXTRACTED_FIELD_NAMES)})"
        )


@dataclass(frozen=True)
class InvoiceFormPrefillValues:
    """
    Flat string values for populating invoice form inputs.

    A field holds its extracted value only when the extraction cleared the
    confidence threshold; otherwise it is an empty string.
    """
    invoice_number: str = ''
    customer_name: str = ''
    customer_abn: str = ''
    issue_date: str = ''
    due_date: str = ''
    invoice_amount: str = ''
    invoice_status: str = ''

    def to_dict(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self)}
