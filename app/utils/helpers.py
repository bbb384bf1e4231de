"""
Helper utilities for the inbox date filer.

Common functions used across domains.
"""

import re
from datetime import date
from pathlib import Path

DATE_PREFIX_PATTERN = re.compile(r'^\d{8} ')


def sanitize_filename(filename: str) -> str:
    """Sanitize filename by replacing invalid characters with underscores."""
    return re.sub(r'[<>:"/\\|?*\x00-\x1f]', '_', filename)


def has_date_prefix(filename: str) -> bool:
    """Check if filename already starts with an 8-digit date and a space."""
    return DATE_PREFIX_PATTERN.match(filename) is not None


def month_folder(day: date) -> str:
    """Folder name for the month of ``day`` (yyyyMM)."""
    return day.strftime('%Y%m')


def date_prefix(day: date) -> str:
    """Filename prefix for ``day`` (yyyyMMdd)."""
    return day.strftime('%Y%m%d')


def get_file_extension(path: Path) -> str:
    """Get lowercase file extension without dot."""
    return path.suffix.lstrip('.').lower()

