"""Message protocol stages - debouncing, framing, and payload verification."""

from .debouncer import SymbolDebouncer
from .framer import MessageFramer
from .payload import (
    PayloadVerifier,
    PayloadError,
    PayloadDecodeError,
    ChecksumMismatchError,
    crc8,
    decode_message,
    encode_payload,
)

__all__ = [
    'SymbolDebouncer', 'MessageFramer', 'PayloadVerifier',
    'PayloadError', 'PayloadDecodeError', 'ChecksumMismatchError',
    'crc8', 'decode_message', 'encode_payload',
]
