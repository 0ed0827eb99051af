"""
Invoice number and ABN extraction.

Both fields are single anchored patterns; they have no tiered confidence of
their own and instead get a fixed bonus over the base confidence.
"""

import re
from typing import Optional, Pattern, Sequence

from .text import clean_line

INVOICE_NUMBER_BONUS = 8
ABN_BONUS = 6

INVOICE_NUMBER_PATTERNS = (
    re.compile(r'invoice(?:\s*(?:no|number|#))?\s*[:\-]\s*([A-Z]{2,6}[- ]?\d{3,10})', re.IGNORECASE),
    re.compile(r'\b(INV[- ]?\d{3,10})\b', re.IGNORECASE),
)

ABN_PATTERNS = (
    re.compile(r'abn\s*[:\-]?\s*(\d{2}\s?\d{3}\s?\d{3}\s?\d{3})', re.IGNORECASE),
    re.compile(r'\b(\d{2}\s\d{3}\s\d{3}\s\d{3})\b'),
)

ABN_DIGITS = 11

_WHITESPACE_RE = re.compile(r'\s+')
_NON_DIGIT_RE = re.compile(r'\D')


def match_value(text: str, patterns: Sequence[Pattern]) -> Optional[str]:
    """First non-empty capture group 1 across the patterns, cleaned."""
    for pattern in patterns:
        match = pattern.search(text)
        value = clean_line(match.group(1)) if match else ''
        if value:
            return value
    return None


def normalize_invoice_number(value: str) -> str:
    """
    Example:
        >>> normalize_invoice_number("inv 1001")
        'INV1001'
    """
    return _WHITESPACE_RE.sub('', value).upper()


def normalize_abn(value: str) -> Optional[str]:
    """
    Reformat an ABN to the XX XXX XXX XXX grouping.

    Returns None unless the value holds exactly 11 digits.

    Example:
        >>> normalize_abn("57184923115")
        '57 184 923 115'
    """
    digits = _NON_DIGIT_RE.sub('', value or '')
    if len(digits) != ABN_DIGITS:
        return None
    return f"{digits[:2]} {digits[2:5]} {digits[5:8]} {digits[8:]}"


def find_invoice_number(text: str) -> Optional[str]:
    raw = match_value(text or '', INVOICE_NUMBER_PATTERNS)
    return normalize_invoice_number(raw) if raw else None


def find_abn(text: str) -> Optional[str]:
    raw = match_value(text or '', ABN_PATTERNS)
    return normalize_abn(raw) if raw else None
