"""
Date Extraction Module.

Recognizes date tokens in OCR text and picks the issue and due dates.

Recognized token shapes, in priority order:
    - numeric with separators: 15/03/2026, 2026-03-15, 15.03.26
    - day month-name year: 15 Mar 2026, 15 March, 2026
    - month-name day year: Mar 15, 2026

Numeric dates are read day-first unless they start with a four-digit
year. Two-digit years are promoted to 20YY. All dates are returned as
ISO strings (YYYY-MM-DD).
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from dateutil.parser import isoparse

from invoice_ocr.utils.logger import get_logger
from .result import ParsedValue
from .text import clean_line, line_has_keyword, split_lines

logger = get_logger(__name__)


MONTH_INDEX = {
    'jan': 1, 'january': 1,
    'feb': 2, 'february': 2,
    'mar': 3, 'march': 3,
    'apr': 4, 'april': 4,
    'may': 5,
    'jun': 6, 'june': 6,
    'jul': 7, 'july': 7,
    'aug': 8, 'august': 8,
    'sep': 9, 'sept': 9, 'september': 9,
    'oct': 10, 'october': 10,
    'nov': 11, 'november': 11,
    'dec': 12, 'december': 12,
}

DATE_TOKEN_PATTERNS = (
    re.compile(r'\b\d{1,4}[./-]\d{1,2}[./-]\d{2,4}\b'),
    re.compile(r'\b\d{1,2}\s+[A-Za-z]{3,9}\s*,?\s*\d{2,4}\b'),
    re.compile(r'\b[A-Za-z]{3,9}\s+\d{1,2},?\s*\d{2,4}\b'),
)

_YMD_RE = re.compile(r'^(\d{4})/(\d{1,2})/(\d{1,2})$')
_DMY_RE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{2,4})$')
_DAY_MONTH_TEXT_RE = re.compile(r'^(\d{1,2})\s+([A-Za-z]{3,9})\s*,?\s*(\d{2,4})$')
_MONTH_DAY_TEXT_RE = re.compile(r'^([A-Za-z]{3,9})\s+(\d{1,2}),?\s*(\d{2,4})$')

# Keyword tiers: (keywords, confidence when inline, confidence when on next line)
DateRule = Tuple[Sequence[str], int, int]

ISSUE_DATE_RULES: Sequence[DateRule] = (
    (('issue date', 'invoice date', 'date issued', 'issued on'), 94, 90),
    (('date',), 84, 80),
)
ISSUE_DATE_FALLBACK_CONFIDENCE = 70

DUE_DATE_RULES: Sequence[DateRule] = (
    (('due date', 'payment due', 'pay by', 'due on', 'balance due', 'please pay by', 'due'), 94, 90),
)
NET_TERMS_CONFIDENCE = 86
DUE_DATE_LAST_TOKEN_CONFIDENCE = 72
DUE_DATE_AFTER_ISSUE_CONFIDENCE = 74

MAX_TERMS_DAYS = 365
MAX_DUE_WINDOW = timedelta(days=365)

NET_TERMS_PATTERNS = (
    re.compile(r'(?:payment\s+terms?|terms?)\s*[:\-]?\s*net\s*(\d{1,3})\b', re.IGNORECASE),
    re.compile(r'\bnet\s*(\d{1,3})\b', re.IGNORECASE),
    re.compile(r'(?:payment\s+terms?|terms?)\s*[:\-]?\s*(\d{1,3})\s*days?\b', re.IGNORECASE),
)


@dataclass(frozen=True)
class DateToken:
    """A recognized date in the source text."""
    raw: str
    start: int
    end: int
    normalized: str


def _expand_year(year: str) -> str:
    return f"20{year}" if len(year) == 2 else year


def normalize_date(value: str) -> Optional[str]:
    """
    Normalize a single date token to YYYY-MM-DD.

    Only month (1-12) and day (1-31) ranges are checked, so "31/02/2026"
    normalizes to "2026-02-31".

    Example:
        >>> normalize_date("15 Mar 2026")
        '2026-03-15'
        >>> normalize_date("Mar 15, 2026")
        '2026-03-15'
        >>> normalize_date("15/03/2026")
        '2026-03-15'
        >>> normalize_date("Foo 15, 2026") is None
        True
    """
    raw = clean_line(value).replace('.', '/').replace('-', '/')
    if not raw:
        return None

    ymd = _YMD_RE.match(raw)
    dmy = _DMY_RE.match(raw)
    if ymd:
        year, month, day = ymd.groups()
    elif dmy:
        day, month, year = dmy.groups()
        year = _expand_year(year)
    else:
        day_month = _DAY_MONTH_TEXT_RE.match(raw)
        month_day = _MONTH_DAY_TEXT_RE.match(raw)
        if day_month:
            day, month_name, year = day_month.groups()
        elif month_day:
            month_name, day, year = month_day.groups()
        else:
            return None

        month_number = MONTH_INDEX.get(month_name.lower())
        if month_number is None:
            return None
        month = str(month_number)
        year = _expand_year(year)

    numeric_year, numeric_month, numeric_day = int(year), int(month), int(day)
    if not (1 <= numeric_month <= 12 and 1 <= numeric_day <= 31):
        return None

    return f"{numeric_year:04d}-{numeric_month:02d}-{numeric_day:02d}"


def get_date_tokens(text: str) -> List[DateToken]:
    """
    Find every normalizable date token in the text, ordered by position.

    When two shapes claim overlapping text (e.g. "15 Mar 2026" also reads
    as "Mar 2026" = 20 Mar 2026), the higher-priority shape keeps it.
    """
    tokens: List[DateToken] = []
    for pattern in DATE_TOKEN_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < token.end and token.start < end for token in tokens):
                continue
            raw = clean_line(match.group(0))
            normalized = normalize_date(raw)
            if normalized is None:
                continue
            tokens.append(DateToken(raw, start, end, normalized))

    return sorted(tokens, key=lambda token: token.start)


def extract_date_from_line(line: str) -> Optional[str]:
    """Return the first date found in a line, trying shapes in priority order."""
    for pattern in DATE_TOKEN_PATTERNS:
        match = pattern.search(line)
        if match:
            normalized = normalize_date(match.group(0))
            if normalized:
                return normalized
    return None


def find_date_by_keywords(
    text: str,
    keywords: Sequence[str],
    inline_confidence: float,
    next_line_confidence: float
) -> ParsedValue:
    """
    Find a date anchored by a keyword line.

    Lines are scanned in document order. The first line containing any of
    the keywords and carrying a date, either on the same line or on the
    physical next line, wins.
    """
    lines = split_lines(text, keep_blank=True)
    for index, line in enumerate(lines):
        if not line or not line_has_keyword(line, keywords):
            continue

        inline_date = extract_date_from_line(line)
        if inline_date:
            return ParsedValue(inline_date, inline_confidence)

        next_line = lines[index + 1] if index + 1 < len(lines) else ''
        next_line_date = extract_date_from_line(next_line)
        if next_line_date:
            return ParsedValue(next_line_date, next_line_confidence)

    return ParsedValue.miss()


def _find_by_rules(text: str, rules: Sequence[DateRule]) -> ParsedValue:
    for keywords, inline_confidence, next_line_confidence in rules:
        found = find_date_by_keywords(text, keywords, inline_confidence, next_line_confidence)
        if found:
            return found
    return ParsedValue.miss()


def find_issue_date_value(text: str) -> ParsedValue:
    """
    Find the invoice issue date.

    Tiers, first success wins:
        1. issue date / invoice date / date issued / issued on (94 inline, 90 next line)
        2. any "date" label (84 / 80)
        3. earliest date token in the document (70)
    """
    text = text or ''
    found = _find_by_rules(text, ISSUE_DATE_RULES)
    if found:
        return found

    tokens = get_date_tokens(text)
    if tokens:
        return ParsedValue(tokens[0].normalized, ISSUE_DATE_FALLBACK_CONFIDENCE)

    return ParsedValue.miss()


def parse_net_terms_days(text: str) -> Optional[int]:
    """
    Read payment terms such as "Net 30" or "Payment Terms: 14 days".

    Returns:
        Number of days in (0, 365], or None.
    """
    for pattern in NET_TERMS_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        days = int(match.group(1))
        if 0 < days <= MAX_TERMS_DAYS:
            return days
    return None


def to_date(iso_value: str) -> Optional[date]:
    """Parse an ISO date, or None if it is not a real calendar date."""
    try:
        return isoparse(iso_value).date()
    except (ValueError, OverflowError):
        return None


def add_days(iso_value: str, days: int) -> Optional[str]:
    """
    Add days to an ISO date.

    Example:
        >>> add_days("2026-01-20", 30)
        '2026-02-19'
    """
    start = to_date(iso_value)
    if start is None:
        return None
    try:
        return (start + timedelta(days=days)).isoformat()
    except OverflowError:
        return None


def find_due_date_value(text: str, issue_date: Optional[str]) -> ParsedValue:
    """
    Find the payment due date.

    Tiers, first success wins:
        1. due-date keywords (94 inline, 90 next line)
        2. issue date + payment terms in days (86)
        3. date tokens: the last one when no issue date is known (72),
           otherwise the last one within 365 days after the issue date (74)

    Args:
        text: Raw OCR text.
        issue_date: ISO issue date found for the same document, if any.
    """
    text = text or ''
    found = _find_by_rules(text, DUE_DATE_RULES)
    if found:
        return found

    net_days = parse_net_terms_days(text)
    if issue_date and net_days:
        computed = add_days(issue_date, net_days)
        if computed:
            logger.debug(f"Due date computed from Net {net_days} terms: {computed}")
            return ParsedValue(computed, NET_TERMS_CONFIDENCE)

    tokens = get_date_tokens(text)
    if not tokens:
        return ParsedValue.miss()

    if not issue_date:
        return ParsedValue(tokens[-1].normalized, DUE_DATE_LAST_TOKEN_CONFIDENCE)

    issue = to_date(issue_date)
    if issue is None:
        return ParsedValue.miss()

    after_issue = []
    for token in tokens:
        candidate = to_date(token.normalized)
        if candidate is None:
            continue
        if timedelta(0) < candidate - issue <= MAX_DUE_WINDOW:
            after_issue.append(token.normalized)

    if after_issue:
        return ParsedValue(after_issue[-1], DUE_DATE_AFTER_ISSUE_CONFIDENCE)

    return ParsedValue.miss()
