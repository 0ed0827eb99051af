"""
Customer Name Extraction Module.

Separates the buyer ("Bill To", "Customer", "Invoice To", ...) from the
seller ("From", "Supplier", "Payee", ...) in OCR text, tolerating garbled
labels, and rejects placeholders, address lines and payment metadata.

Strategies, first success wins:
    1. "label: value" on one line with a customer label (92)
    2. a customer label line, with the name inline (93) or on one of the
       following 8 lines (89)
    3. best free-standing name line, weighted by nearby anchors (82 / 76)
    4. first plausible name after any customer anchor (79)

All scoring weights are module-level constants.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from invoice_ocr.utils.logger import get_logger
from .result import ParsedValue
from .text import clean_line, line_has_keyword, normalize_label_token, split_lines

logger = get_logger(__name__)


# Label vocabularies, matched against normalize_label_token() output
CUSTOMER_LABELS = (
    'customer', 'customername', 'billto', 'billedto', 'invoiceto',
    'soldto', 'recipient', 'client', 'customerto', 'shipto',
)
SUPPLIER_LABELS = (
    'from', 'supplier', 'seller', 'vendor', 'remitto', 'issuer',
    'ourdetails', 'payee',
)
NON_CUSTOMER_FIELD_LABELS = (
    'invoice', 'invoicenumber', 'amount', 'amountdue', 'total',
    'duedate', 'issuedate', 'date', 'abn', 'acn', 'paymentadvice',
    'accountnumber', 'accountno', 'remittanceadvice',
)
GENERIC_NAME_TOKENS = frozenset((
    'customer', 'customername', 'billto', 'billedto', 'invoiceto',
    'soldto', 'recipient', 'client', 'company', 'name', 'to', 'from',
    'supplier', 'vendor', 'payee',
))

# Confidence per strategy
LABELED_VALUE_CONFIDENCE = 92
INLINE_LABEL_CONFIDENCE = 93
LOOKAHEAD_CONFIDENCE = 89
ANCHORED_SCAN_CONFIDENCE = 82
UNANCHORED_SCAN_CONFIDENCE = 76
LAST_RESORT_CONFIDENCE = 79

# Name plausibility weights
REJECTED_SCORE = -1
ENTITY_SUFFIX_BONUS = 4
ALL_CAPS_BONUS = 1
WORD_PAIR_BONUS = 2
NO_DIGIT_RUN_BONUS = 1
DIGIT_RUN_PENALTY = 2
NAME_LENGTH_BONUS = 1
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 90
PREFERRED_NAME_LENGTH = (10, 60)

# Label lookahead
LABEL_LOOKAHEAD_LINES = 8
LOOKAHEAD_DISTANCE_PENALTY = 0.15
DOMAIN_SUFFIX_BONUS = 3

# Free-standing scan
SCAN_LINE_LIMIT = 45
CUSTOMER_ANCHOR_RADIUS = 4
SUPPLIER_ANCHOR_RADIUS = 3
NEAR_CUSTOMER_BONUS = 5
NEAR_SUPPLIER_PENALTY = 6
BEFORE_CUSTOMER_ANCHOR_PENALTY = 3
INVOICE_WORD_PENALTY = 4
HEADER_LINE_PENALTY = 2
HEADER_LINE_COUNT = 4
MIN_SCAN_SCORE = 5

# Last resort
LAST_RESORT_LOOKAHEAD_LINES = 5


_QUOTES_RE = re.compile(r'^["\'`]+|["\'`]+$')
_REGISTRATION_CLAUSE_RE = re.compile(r'\b(?:abn|acn)\b.*$', re.IGNORECASE)
_TRAILING_PUNCTUATION_RE = re.compile(r'[,;:.\-]+$')
_MERGED_LABEL_RE = re.compile(
    r'^(?:(?:customer(?:\s+name)?)|(?:bill\s*to)|(?:billed\s*to)|(?:invoice\s*to)'
    r'|(?:sold\s*to)|recipient|client|company|to)\s*[:\-]?\s+',
    re.IGNORECASE
)
_LABELED_VALUE_RE = re.compile(r'^(.{1,40}?)(?:[:\-]| {2,}|\t+)(.+)$')

_ENTITY_SUFFIX_RE = re.compile(r'\b(?:pty|limited|ltd|llc|inc|group|co|company)\b', re.IGNORECASE)
_ALL_CAPS_RE = re.compile(r"^[A-Z0-9 '&.\-]+$")
_WORD_PAIR_RE = re.compile(r'[A-Za-z]{4,}\s+[A-Za-z]{3,}')
_DIGIT_RUN_RE = re.compile(r'\d{3,}')
_LONG_DIGIT_RUN_RE = re.compile(r'\d{4,}')
_DOMAIN_SUFFIX_RE = re.compile(r'\.[a-z]{2,}(?:\.[a-z]{2,})?$', re.IGNORECASE)
_LETTER_RE = re.compile(r'[A-Za-z]')
_PAYMENT_METADATA_RE = re.compile(
    r'\b(?:payment\s*advice|remittance|account\s*(?:number|no)|statement)\b',
    re.IGNORECASE
)

_URL_RE = re.compile(r'\b(?:www\.|http)', re.IGNORECASE)
_META_PATTERNS = (
    re.compile(
        r'\b(?:invoice|total|amount|due|date|abn|acn|tax|gst|phone|mobile|email|statement|balance)\b',
        re.IGNORECASE
    ),
    re.compile(r'\b(?:payment\s*advice|remittance\s*advice)\b', re.IGNORECASE),
    re.compile(r'\b(?:account\s*(?:number|no))\b', re.IGNORECASE),
    re.compile(r'\bpo\s*box\b', re.IGNORECASE),
    re.compile(r'\b(?:suburb|state|postcode|post\s*code)\b', re.IGNORECASE),
)
_STREET_WORD_PATTERNS = (
    re.compile(r'\b(?:street|road|avenue|drive|lane|boulevard)\b', re.IGNORECASE),
    re.compile(r'\b(?:st|rd|ave|dr|ln|blvd)\.?\b', re.IGNORECASE),
)
_STREET_NUMBER_RE = re.compile(r'^\d{1,5}\s+\w+')
_DIGIT_RE = re.compile(r'\d')
_NO_LETTERS_RE = re.compile(r'^[^A-Za-z]*$')
_COMPACT_RE = re.compile(r'[^a-z]')


@dataclass(frozen=True)
class LabeledValue:
    """A line split into a normalized label token and its value."""
    label_token: str = ''
    value: str = ''


def _matches_any_label(token: str, labels: Sequence[str]) -> bool:
    if not token:
        return False
    return any(token.startswith(label) or label in token for label in labels)


def is_customer_label_token(token: str) -> bool:
    return _matches_any_label(token, CUSTOMER_LABELS)


def is_supplier_label_token(token: str) -> bool:
    return _matches_any_label(token, SUPPLIER_LABELS)


def is_non_customer_field_label_token(token: str) -> bool:
    return _matches_any_label(token, NON_CUSTOMER_FIELD_LABELS)


def extract_labeled_value(line: str) -> LabeledValue:
    """
    Split "Label: value" (or "Label - value") into label token and value.

    Returns an empty LabeledValue when the line has no separator.
    """
    match = _LABELED_VALUE_RE.match(clean_line(line))
    if not match:
        return LabeledValue()
    return LabeledValue(normalize_label_token(match.group(1)), clean_line(match.group(2)))


def normalize_customer_name(value: str) -> str:
    """
    Clean a candidate name.

    Strips quotes, a trailing ABN/ACN clause, trailing punctuation and a
    customer label that OCR merged into the value.

    Example:
        >>> normalize_customer_name("Customer ACME Pty Ltd ABN 11 111 111 111")
        'ACME Pty Ltd'
    """
    normalized = _QUOTES_RE.sub('', clean_line(value))
    normalized = _REGISTRATION_CLAUSE_RE.sub('', normalized)
    normalized = _TRAILING_PUNCTUATION_RE.sub('', normalized.strip()).strip()
    normalized = _MERGED_LABEL_RE.sub('', normalized)
    return normalized.strip()


def is_address_or_meta_line(value: str) -> bool:
    """
    True for lines that describe contact details, addresses or invoice
    metadata rather than a party's name.
    """
    line = clean_line(value)
    if not line:
        return True
    if '@' in line or _URL_RE.search(line):
        return True

    if any(pattern.search(line) for pattern in _META_PATTERNS):
        return True

    if _STREET_NUMBER_RE.match(line) and any(
        pattern.search(line) for pattern in _STREET_WORD_PATTERNS
    ):
        return True

    digit_count = len(_DIGIT_RE.findall(line))
    return digit_count >= 6 or bool(_NO_LETTERS_RE.match(line))


def is_likely_customer_name(value: str) -> bool:
    """Gate applied before a line may be returned as a customer name."""
    cleaned = normalize_customer_name(value)
    if not cleaned or not MIN_NAME_LENGTH <= len(cleaned) <= MAX_NAME_LENGTH:
        return False
    if _COMPACT_RE.sub('', cleaned.lower()) in GENERIC_NAME_TOKENS:
        return False
    if _PAYMENT_METADATA_RE.search(cleaned):
        return False
    if not _LETTER_RE.search(cleaned):
        return False
    if _LONG_DIGIT_RUN_RE.search(cleaned):
        return False
    return not is_address_or_meta_line(cleaned)


def score_customer_name_candidate(value: str) -> float:
    """
    Score how much a string looks like a business or person name.

    Returns:
        REJECTED_SCORE (-1) for implausible names, otherwise a score
        where higher is more name-like.
    """
    cleaned = normalize_customer_name(value)
    if not is_likely_customer_name(cleaned):
        return REJECTED_SCORE

    score = 0
    if _ENTITY_SUFFIX_RE.search(cleaned):
        score += ENTITY_SUFFIX_BONUS
    if _ALL_CAPS_RE.match(cleaned):
        score += ALL_CAPS_BONUS
    if _WORD_PAIR_RE.search(cleaned):
        score += WORD_PAIR_BONUS
    if _DIGIT_RUN_RE.search(cleaned):
        score -= DIGIT_RUN_PENALTY
    else:
        score += NO_DIGIT_RUN_BONUS
    shortest, longest = PREFERRED_NAME_LENGTH
    if shortest <= len(cleaned) <= longest:
        score += NAME_LENGTH_BONUS

    return score


def _best_name_after_label(lines: List[str], label_index: int) -> Optional[str]:
    best_value = None
    best_score = None

    for distance in range(1, LABEL_LOOKAHEAD_LINES + 1):
        if label_index + distance >= len(lines):
            break
        candidate_line = lines[label_index + distance]

        candidate_token = normalize_label_token(candidate_line)
        if is_non_customer_field_label_token(candidate_token) and not is_customer_label_token(candidate_token):
            continue

        candidate = normalize_customer_name(candidate_line)
        if not is_likely_customer_name(candidate):
            continue

        score = score_customer_name_candidate(candidate) - distance * LOOKAHEAD_DISTANCE_PENALTY
        if _DOMAIN_SUFFIX_RE.search(candidate):
            score += DOMAIN_SUFFIX_BONUS

        if best_score is None or score > best_score:
            best_value, best_score = candidate, score

    return best_value


class _Anchors:
    """Line indexes of customer and supplier labels seen while scanning."""

    def __init__(self) -> None:
        self.customer: List[int] = []
        self.supplier: List[int] = []

    def near_customer(self, index: int) -> bool:
        return any(abs(anchor - index) <= CUSTOMER_ANCHOR_RADIUS for anchor in self.customer)

    def near_supplier(self, index: int) -> bool:
        return any(abs(anchor - index) <= SUPPLIER_ANCHOR_RADIUS for anchor in self.supplier)


def _scan_free_standing(lines: List[str], anchors: _Anchors) -> Optional[str]:
    has_customer_anchor = bool(anchors.customer)
    first_customer_anchor = min(anchors.customer) if has_customer_anchor else -1

    best_candidate = None
    best_score = REJECTED_SCORE
    for index, raw_line in enumerate(lines[:SCAN_LINE_LIMIT]):
        candidate = normalize_customer_name(raw_line)
        score = score_customer_name_candidate(candidate)
        if score < 0:
            continue

        near_customer = anchors.near_customer(index)
        if near_customer:
            score += NEAR_CUSTOMER_BONUS
        if anchors.near_supplier(index):
            score -= NEAR_SUPPLIER_PENALTY
        if has_customer_anchor and index < first_customer_anchor:
            score -= BEFORE_CUSTOMER_ANCHOR_PENALTY
        if line_has_keyword(candidate, ('tax invoice', 'invoice')):
            score -= INVOICE_WORD_PENALTY
        if index < HEADER_LINE_COUNT and not near_customer:
            score -= HEADER_LINE_PENALTY

        if score > best_score:
            best_score, best_candidate = score, candidate

    if best_candidate is not None and best_score >= MIN_SCAN_SCORE:
        return best_candidate
    return None


def find_customer_name(text: str) -> ParsedValue:
    """
    Find the customer (buyer) name.

    Example:
        >>> find_customer_name("FROM: Payee Holdings Pty Ltd\\nBill To\\nAcme Pty Ltd")
        ParsedValue(value='Acme Pty Ltd', confidence=89)
    """
    lines = split_lines(text or '')
    anchors = _Anchors()

    for index, line in enumerate(lines):
        labeled = extract_labeled_value(line)
        if is_customer_label_token(labeled.label_token):
            anchors.customer.append(index)
            direct_name = normalize_customer_name(labeled.value)
            if is_likely_customer_name(direct_name):
                return ParsedValue(direct_name, LABELED_VALUE_CONFIDENCE)
        if is_supplier_label_token(labeled.label_token):
            anchors.supplier.append(index)

        token = normalize_label_token(line)
        if is_customer_label_token(token):
            anchors.customer.append(index)
            inline_name = normalize_customer_name(line)
            if is_likely_customer_name(inline_name):
                return ParsedValue(inline_name, INLINE_LABEL_CONFIDENCE)

            nearby_name = _best_name_after_label(lines, index)
            if nearby_name is not None:
                return ParsedValue(nearby_name, LOOKAHEAD_CONFIDENCE)
        if is_supplier_label_token(token):
            anchors.supplier.append(index)

    scanned_name = _scan_free_standing(lines, anchors)
    if scanned_name is not None:
        confidence = ANCHORED_SCAN_CONFIDENCE if anchors.customer else UNANCHORED_SCAN_CONFIDENCE
        return ParsedValue(scanned_name, confidence)

    for anchor_index in anchors.customer:
        for distance in range(1, LAST_RESORT_LOOKAHEAD_LINES + 1):
            candidate_index = anchor_index + distance
            if candidate_index >= len(lines):
                break
            candidate = normalize_customer_name(lines[candidate_index])
            if is_likely_customer_name(candidate) and not anchors.near_supplier(candidate_index):
                logger.debug(f"Customer name taken from anchor at line {anchor_index}")
                return ParsedValue(candidate, LAST_RESORT_CONFIDENCE)

    return ParsedValue.miss()
