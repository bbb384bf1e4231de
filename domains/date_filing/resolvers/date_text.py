"""Parsing of free-form date-time text found in mail headers."""

from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional

from dateutil import parser as dateutil_parser

# Two unrelated defaults: a date part dateutil fills in from the default
# differs between them, so a result that changes was not fully in the text.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def parse_date_text(text: str) -> Optional[datetime]:
    """
    Parse a textual date-time.

    RFC 2822 dates ("Mon, 3 Jun 2024 10:15:00 +0000") are tried first,
    then the general formats python-dateutil understands ("Monday, June 3,
    2024 10:15 AM"). Text lacking a year, month or day ("10:15", "Mon")
    is rejected.

    Args:
        text: Candidate text, typically a header value

    Returns:
        Parsed datetime, or None if the text is not a complete date
    """
    text = text.strip()
    if not text:
        return None

    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        pass

    try:
        first = dateutil_parser.parse(text, default=_DEFAULT_A)
        second = dateutil_parser.parse(text, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return None

    if first.date() != second.date():
        return None
    return first
