"""
Invoice Amount Extraction Module.

Picks the invoice total from OCR text using an ordered table of keyword
tiers. The first tier that yields any valid amount wins, even when a
lower tier would have produced a larger number.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from invoice_ocr.utils.logger import get_logger
from .result import ParsedValue
from .text import line_has_keyword, split_lines

logger = get_logger(__name__)


@dataclass(frozen=True)
class AmountRule:
    """A keyword tier and the confidence it grants."""
    keywords: Sequence[str]
    confidence: int


AMOUNT_RULES: Sequence[AmountRule] = (
    AmountRule(('amount due',), 95),
    AmountRule(('total aud',), 94),
    AmountRule(('amount inc gst', 'amount incl gst'), 93),
    AmountRule(('total inc gst', 'total incl gst'), 91),
    AmountRule(('total due', 'balance due'), 90),
    AmountRule(('invoice amount',), 88),
    AmountRule(('total',), 82),
)
FALLBACK_AMOUNT_CONFIDENCE = 72

AMOUNT_TOKEN_RE = re.compile(
    r'\b(?:AUD|USD|NZD)?\s*\$?\s*(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}\b',
    re.IGNORECASE
)
_TAX_TOKEN_RE = re.compile(r'\b(?:gst|tax)\b', re.IGNORECASE)

# Lines describing part of the total rather than the total itself
_EXCLUDED_LINE_RE = re.compile(
    r'\b(?:subtotal|sub total|gst|tax|withholding|wht)\b',
    re.IGNORECASE
)
# "inc GST" in a keyword is part of the total label, not a GST line item
_INCLUSIVE_GST_RE = re.compile(r'\binc(?:l)?\.?\s+gst\b', re.IGNORECASE)

_NON_AMOUNT_CHARS_RE = re.compile(r'[^\d.,\-]')


def normalize_amount(value: str) -> Optional[str]:
    """
    Strip currency markers and separators, format to two decimals.

    Example:
        >>> normalize_amount("AUD $1,234.5")
        '1234.50'
        >>> normalize_amount("$0.00") is None
        True
    """
    stripped = _NON_AMOUNT_CHARS_RE.sub('', value or '').replace(',', '').strip()
    try:
        parsed = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(parsed) or parsed <= 0:
        return None
    return f"{parsed:.2f}"


def get_amount_tokens(line: str) -> List[str]:
    """Amount-looking tokens in a line, excluding GST/tax tokens."""
    return [
        ' '.join(token.split())
        for token in AMOUNT_TOKEN_RE.findall(line)
        if not _TAX_TOKEN_RE.search(token)
    ]


def is_excluded_line(line: str) -> bool:
    """True for subtotal, GST, tax and withholding lines."""
    return bool(_EXCLUDED_LINE_RE.search(_INCLUSIVE_GST_RE.sub(' ', line)))


def _largest_amount(tokens: Iterable[str]) -> Optional[str]:
    best_value = None
    best_number = -1.0
    for token in tokens:
        normalized = normalize_amount(token)
        if normalized is None:
            continue
        number = float(normalized)
        if number > best_number:
            best_number = number
            best_value = normalized
    return best_value


def _tier_candidates(lines: List[str], keywords: Sequence[str]) -> List[str]:
    candidates: List[str] = []
    for index, line in enumerate(lines):
        if not line_has_keyword(line, keywords) or is_excluded_line(line):
            continue

        inline_tokens = get_amount_tokens(line)
        if inline_tokens:
            candidates.extend(inline_tokens)
        elif index + 1 < len(lines) and not is_excluded_line(lines[index + 1]):
            # Label with its value on the following line
            candidates.extend(get_amount_tokens(lines[index + 1]))
    return candidates


def find_amount_value(text: str) -> ParsedValue:
    """
    Find the invoice total.

    Each tier collects amounts from its keyword lines, or from the line
    after a keyword line that carries no amount itself. The largest valid
    amount in the first productive tier wins. Without any keyword hit the
    largest amount in the document is used at confidence 72.

    Example:
        >>> find_amount_value("Amount Due: 100.00\\nTotal: 999.00")
        ParsedValue(value='100.00', confidence=95)
    """
    lines = split_lines(text or '')

    for rule in AMOUNT_RULES:
        best = _largest_amount(_tier_candidates(lines, rule.keywords))
        if best is not None:
            logger.debug(f"Amount {best} matched tier {rule.keywords[0]!r}")
            return ParsedValue(best, rule.confidence)

    fallback = _largest_amount(
        token for line in lines for token in get_amount_tokens(line)
    )
    if fallback is not None:
        return ParsedValue(fallback, FALLBACK_AMOUNT_CONFIDENCE)

    return ParsedValue.miss()
