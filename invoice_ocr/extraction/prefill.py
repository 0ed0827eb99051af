"""
Prefill Projector.

The only sanctioned path from extraction results to auto-filled form
values: a field is passed through only when its calibrated confidence
reaches the threshold, so low-confidence guesses are left for review.
"""

from dataclasses import fields as dataclass_fields

from .confidence import clamp_confidence
from .result import InvoiceFormPrefillValues, InvoiceOcrResult

DEFAULT_PREFILL_THRESHOLD = 80


def to_prefill_values(
    result: InvoiceOcrResult,
    threshold: float = DEFAULT_PREFILL_THRESHOLD
) -> InvoiceFormPrefillValues:
    """
    Project a result onto flat form values.

    Args:
        result: Extraction result.
        threshold: Minimum confidence (clamped to 0-100) for a value to be kept.

    Returns:
        InvoiceFormPrefillValues with '' for every field below threshold.

    Example:
        >>> values = to_prefill_values(result, threshold=80)
        >>> values.invoice_amount
        '2340.00'
    """
    minimum = clamp_confidence(threshold)
    values = {}
    for prefill_field in dataclass_fields(InvoiceFormPrefillValues):
        field = getattr(result, prefill_field.name)
        keep = field.value is not None and field.confidence >= minimum
        values[prefill_field.name] = field.value if keep else ''
    return InvoiceFormPrefillValues(**values)


# Name used by form-layer callers
to_invoice_form_prefill_values = to_prefill_values
