"""
Effective date resolution per file type.

- pdf: filesystem creation date
- eml: first parseable Date / Sent / Delivery-Date / Received header
- msg: sent date from the injected MsgDateReader

Every failure degrades to the creation date; nothing raised here may reach
the watcher.
"""

import re
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from app.models.schemas import DateSource, FileItem, ResolvedDate
from domains.date_filing.errors import DateResolutionFailure
from domains.date_filing.resolvers.date_text import parse_date_text
from domains.date_filing.resolvers.msg_reader import MsgDateReader

# Fixed tie-break order for .eml headers. "Date" is authoritative; the
# others are only consulted when it is missing or unparseable.
EML_HEADER_ORDER = ("Date", "Sent", "Delivery-Date", "Received")


def _header_pattern(name: str) -> re.Pattern:
    return re.compile(rf'^{re.escape(name)}:(.*)$', re.IGNORECASE | re.MULTILINE)


_HEADER_PATTERNS = {name: _header_pattern(name) for name in EML_HEADER_ORDER}


def unfold_headers(text: str) -> str:
    """Join folded continuation lines onto the header line they continue."""
    return re.sub(r'\r?\n[ \t]+', ' ', text)


def find_eml_date(text: str) -> Optional[tuple[str, date]]:
    """
    Scan message text for the first usable date header.

    Args:
        text: Full message text

    Returns:
        (header name, date) or None if no header yields a date
    """
    text = unfold_headers(text)

    for name in EML_HEADER_ORDER:
        for match in _HEADER_PATTERNS[name].finditer(text):
            value = match.group(1)
            if name == "Received":
                if ';' not in value:
                    continue
                value = value.rsplit(';', 1)[1]

            parsed = parse_date_text(value)
            if parsed is None:
                logger.debug(f"Unparseable {name} header: {value.strip()!r}")
                continue
            return name, parsed.date()

    return None


class DateResolver:
    """Resolves the effective date of a file from its type."""

    def __init__(
        self,
        msg_reader: Optional[MsgDateReader] = None,
        encoding: str = "utf-8",
    ):
        """
        Initialize date resolver.

        Args:
            msg_reader: Optional .msg capability; None means unavailable
            encoding: Text encoding for .eml files
        """
        self.msg_reader = msg_reader
        self.encoding = encoding
        self._strategies: dict[str, Callable[[FileItem], ResolvedDate]] = {
            "pdf": self._resolve_creation,
            "eml": self._resolve_eml,
            "msg": self._resolve_msg,
        }

    def resolve(self, item: FileItem) -> ResolvedDate:
        """
        Produce the effective date for ``item``.

        Unknown extensions use the creation date. Never raises.
        """
        strategy = self._strategies.get(item.extension, self._resolve_creation)

        try:
            return strategy(item)
        except DateResolutionFailure as e:
            logger.info(f"{item.path.name}: {e}; using creation date {item.created}")
        except Exception as e:
            logger.warning(
                f"{item.path.name}: date resolution failed ({e!r}); using creation date {item.created}"
            )

        return self._resolve_creation(item)

    def _resolve_creation(self, item: FileItem) -> ResolvedDate:
        return ResolvedDate(value=item.created, source=DateSource.CREATION_TIME)

    def _resolve_eml(self, item: FileItem) -> ResolvedDate:
        text = Path(item.path).read_text(encoding=self.encoding, errors="replace")
        found = find_eml_date(text)
        if found is None:
            raise DateResolutionFailure("no parseable date header")

        header, value = found
        logger.info(f"{item.path.name}: {header} header gives {value}")
        return ResolvedDate(value=value, source=DateSource.TEXT_HEADER, header=header)

    def _resolve_msg(self, item: FileItem) -> ResolvedDate:
        if self.msg_reader is None:
            raise DateResolutionFailure("MSG date reader is not available")

        try:
            with Path(item.path).open("rb") as stream:
                sent = self.msg_reader.try_read_sent_date(stream)
        except Exception as e:
            raise DateResolutionFailure(f"MSG date reader failed: {e!r}") from e

        if sent is None:
            raise DateResolutionFailure("MSG file carries no sent date")

        logger.info(f"{item.path.name}: sent date {sent.date()}")
        return ResolvedDate(value=sent.date(), source=DateSource.CONTAINER_METADATA)
