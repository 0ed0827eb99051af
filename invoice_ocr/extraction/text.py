"""
Text Normalizer.

Line-level helpers shared by every field extractor. OCR output wraps and
pads lines unpredictably, so all substring and regex matching happens on
whitespace-collapsed lines.
"""

import re
from typing import Iterable, List

_WHITESPACE_RE = re.compile(r'\s+')
_LINE_BREAK_RE = re.compile(r'\r?\n')
_NON_LETTER_RE = re.compile(r'[^a-z]')

# Characters OCR commonly produces in place of letters inside labels
_LABEL_CONFUSABLES = str.maketrans({'0': 'o', '1': 'l', '|': 'l', '5': 's'})


def clean_line(value: str) -> str:
    """
    Collapse every whitespace run to a single space and trim the ends.

    Example:
        >>> clean_line("  Bill \\t To  ")
        'Bill To'
    """
    return _WHITESPACE_RE.sub(' ', value or '').strip()


def split_lines(text: str, keep_blank: bool = False) -> List[str]:
    """
    Split text on line breaks and clean each line.

    Args:
        text: Raw OCR text.
        keep_blank: Keep empty lines so positions match the physical layout.

    Returns:
        List of cleaned lines.
    """
    lines = [clean_line(line) for line in _LINE_BREAK_RE.split(text or '')]
    if keep_blank:
        return lines
    return [line for line in lines if line]


def normalize_label_token(value: str) -> str:
    """
    Reduce a label to lowercase letters, undoing common OCR confusions.

    Example:
        >>> normalize_label_token("Bi11 T0:")
        'billto'
    """
    lowered = clean_line(value).lower().translate(_LABEL_CONFUSABLES)
    return _NON_LETTER_RE.sub('', lowered)


def line_has_keyword(line: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring test against any of the keywords."""
    lower = line.lower()
    return any(keyword in lower for keyword in keywords)
