"""
Sent-date readers for Outlook .msg containers.

The resolver only depends on the MsgDateReader protocol. The default
implementation wraps the extract-msg library, installed with the ``msg``
extra; when it is missing the capability is simply unavailable.
"""

import importlib
import importlib.util
from datetime import datetime
from typing import BinaryIO, Optional, Protocol

from loguru import logger

from domains.date_filing.resolvers.date_text import parse_date_text


class MsgDateReader(Protocol):
    """Capability: read the sent date out of a .msg stream."""

    def try_read_sent_date(self, stream: BinaryIO) -> Optional[datetime]:
        ...


class ExtractMsgDateReader:
    """MsgDateReader backed by extract-msg."""

    def __init__(self, module=None):
        self._extract_msg = module or importlib.import_module("extract_msg")

    def try_read_sent_date(self, stream: BinaryIO) -> Optional[datetime]:
        with self._extract_msg.Message(stream) as msg:
            sent = msg.date

        # Older extract-msg releases return the raw header string
        if isinstance(sent, str):
            return parse_date_text(sent)
        return sent


def load_msg_reader(enabled: bool = True) -> Optional[MsgDateReader]:
    """
    Build the default .msg reader.

    Args:
        enabled: Settings switch for the capability

    Returns:
        Reader instance, or None if disabled or extract-msg is not installed
    """
    if not enabled:
        logger.info("MSG date reader disabled by configuration")
        return None

    if importlib.util.find_spec("extract_msg") is None:
        logger.warning("extract-msg is not installed; .msg files will use their creation date")
        return None

    logger.info("MSG date reader loaded (extract-msg)")
    return ExtractMsgDateReader()
