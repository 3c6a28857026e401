"""
Message framer.

Accumulates confirmed symbols into a message. Silence is the only delimiter:
once `blank_limit` blank symbols have been counted and the message is not
empty, the message is complete.

The blank counter is cumulative. It is reset only when a message is emitted,
not when a tone arrives, so blanks before and between symbols count towards
the limit.
"""

import logging
from typing import Iterable, Iterator, Optional

from ..detection.dtmf_constants import NO_TONE

logger = logging.getLogger(__name__)


class MessageFramer:
    """Delimits the debounced symbol stream into messages."""

    def __init__(self, blank_limit: int = 5):
        if blank_limit <= 0:
            raise ValueError(f"blank_limit must be positive, got {blank_limit}")
        self.blank_limit = blank_limit
        self.message = ""
        self.blank_count = 0

    def push(self, symbol: str) -> Optional[str]:
        """
        Feed one debounced symbol.

        Returns:
            The completed message, or None
        """
        logger.debug(f"symbol <{symbol}>, blanks {self.blank_count}, message '{self.message}'")

        if symbol != NO_TONE:
            self.message += symbol
            return None

        self.blank_count += 1
        if self.blank_count >= self.blank_limit and self.message:
            message = self.message
            self.message = ""
            self.blank_count = 0
            logger.info(f"Framed message '{message}'")
            return message
        return None

    def process_stream(self, symbols: Iterable[str]) -> Iterator[str]:
        """Frame a whole symbol stream, yielding completed messages."""
        for symbol in symbols:
            message = self.push(symbol)
            if message is not None:
                yield message
