#!/usr/bin/env python3
"""
Payload Decoder/Verifier

Message Format:
---------------
A framed message is a string of DTMF symbols read as hex digits. The two
non-hex keys stand in for the remaining digits:

    '*' -> 'e'
    '#' -> 'f'
    'A'..'D' and '0'..'9' are already hex

Decoded bytes:

    [ payload bytes ... ][ CRC-8 ]

CRC-8 parameters: polynomial 0x07, init 0x00, no reflection, no final XOR
(check value 0xF4 for b"123456789").

Example: payload b"1" (0x31) has CRC-8 0x97, so it is sent as "3197".

Rejections (malformed hex, checksum mismatch) are logged and the message is
dropped. A noisy recording produces plenty of them; they are not failures.
"""

import logging
from typing import Dict, Iterable, Iterator, Optional

import crcmod.predefined

logger = logging.getLogger(__name__)

_crc8_func = crcmod.predefined.mkPredefinedCrcFun('crc-8')

_DTMF_TO_HEX = str.maketrans({'*': 'e', '#': 'f'})
_HEX_TO_DTMF = str.maketrans({
    'e': '*', 'f': '#',
    'a': 'A', 'b': 'B', 'c': 'C', 'd': 'D',
    'E': '*', 'F': '#',
})


class PayloadError(ValueError):
    """A framed message could not be turned into a payload."""


class PayloadDecodeError(PayloadError):
    """The message is not a valid hex string."""


class ChecksumMismatchError(PayloadError):
    """The trailing CRC-8 byte does not match the payload."""

    def __init__(self, computed: int, received: int):
        self.computed = computed
        self.received = received
        super().__init__(f"checksum mismatch: computed 0x{computed:02x}, read 0x{received:02x}")


def crc8(data: bytes) -> int:
    """CRC-8 (poly 0x07) of `data`."""
    return _crc8_func(bytes(data))


def dtmf_to_hex(message: str) -> str:
    """Map DTMF symbols to hex digits ('*' -> 'e', '#' -> 'f')."""
    return message.translate(_DTMF_TO_HEX)


def hex_to_dtmf(hex_string: str) -> str:
    """Map hex digits to DTMF symbols ('e' -> '*', 'f' -> '#', a-d upper-cased)."""
    return hex_string.translate(_HEX_TO_DTMF)


def encode_payload(payload: bytes) -> str:
    """Render `payload` plus its CRC-8 byte as DTMF symbols."""
    framed = bytes(payload) + bytes([crc8(payload)])
    return hex_to_dtmf(framed.hex())


def decode_message(message: str) -> bytes:
    """
    Decode a framed DTMF message and verify its checksum.

    Args:
        message: DTMF symbols, payload followed by one CRC-8 byte

    Returns:
        The payload with the checksum byte stripped

    Raises:
        PayloadDecodeError: odd length, non-hex symbol, or empty message
        ChecksumMismatchError: CRC-8 does not match
    """
    hex_string = dtmf_to_hex(message)
    try:
        decoded = bytes.fromhex(hex_string)
    except ValueError as e:
        raise PayloadDecodeError(f"cannot hex-decode '{hex_string}': {e}") from e
    if not decoded:
        raise PayloadDecodeError("empty message")

    payload, received = decoded[:-1], decoded[-1]
    computed = crc8(payload)
    logger.debug(f"Decoded {decoded.hex()}: checksum calculated 0x{computed:02x}, read 0x{received:02x}")

    if computed != received:
        raise ChecksumMismatchError(computed, received)
    return payload


class PayloadVerifier:
    """Stage wrapper around decode_message() that drops bad messages."""

    def __init__(self):
        self.stats: Dict[str, int] = {
            'messages': 0,
            'verified': 0,
            'decode_errors': 0,
            'checksum_errors': 0,
        }

    def push(self, message: str) -> Optional[bytes]:
        """
        Verify one framed message.

        Returns:
            The payload, or None if the message was discarded
        """
        self.stats['messages'] += 1
        logger.info(f"Got message '{message}'")

        try:
            payload = decode_message(message)
        except ChecksumMismatchError as e:
            self.stats['checksum_errors'] += 1
            logger.info(f"Discarding message '{message}': {e}")
            return None
        except PayloadDecodeError as e:
            self.stats['decode_errors'] += 1
            logger.error(f"Discarding message '{message}': {e}")
            return None

        self.stats['verified'] += 1
        logger.info(f"Verified payload {payload!r}")
        return payload

    def process_stream(self, messages: Iterable[str]) -> Iterator[bytes]:
        """Verify a stream of messages, yielding payloads."""
        for message in messages:
            payload = self.push(message)
            if payload is not None:
                yield payload

    def get_statistics(self) -> Dict[str, int]:
        return dict(self.stats)
