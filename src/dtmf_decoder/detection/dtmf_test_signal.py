#!/usr/bin/env python3
"""
DTMF Test Signal Generator

Synthesizes protocol-conformant audio for validating the decoder:

    payload → payload + CRC-8 → DTMF symbols → tones

Signal structure:
    [lead-in silence][tone][tone]...[tone][lead-out silence]

Tones are back to back with no gaps, each tone_duration long, each the sum
of its low-group and high-group sines at equal amplitude. The lead-out must
be long enough for the framer to see the end-of-message silence.

Usage:
    generator = DTMFTestSignalGenerator(sample_rate=8000)
    audio = generator.generate_payload(b"hello")
"""

from typing import Mapping, Tuple

import numpy as np

from .dtmf_constants import DTMF_SYMBOL_FREQUENCIES
from ..protocol.payload import encode_payload


class DTMFTestSignalGenerator:
    """
    Generate DTMF message audio.

    This is a deterministic signal that can be generated at any sample rate.
    """

    def __init__(
        self,
        sample_rate: int = 8000,
        tone_duration: float = 0.10,
        amplitude: float = 0.4,
        symbol_frequencies: Mapping[str, Tuple[int, int]] = DTMF_SYMBOL_FREQUENCIES
    ):
        """
        Args:
            sample_rate: Sample rate in Hz
            tone_duration: Length of each tone in seconds
            amplitude: Peak amplitude of each of the two sines
            symbol_frequencies: Mapping symbol -> (low Hz, high Hz)
        """
        self.sample_rate = sample_rate
        self.tone_duration = tone_duration
        self.amplitude = amplitude
        self.symbol_frequencies = symbol_frequencies

    def _num_samples(self, duration_sec: float) -> int:
        return int(round(duration_sec * self.sample_rate))

    def generate_silence(self, duration_sec: float) -> np.ndarray:
        return np.zeros(self._num_samples(duration_sec), dtype=np.float32)

    def generate_tone(self, symbol: str) -> np.ndarray:
        """One dual-tone burst for `symbol`."""
        if symbol not in self.symbol_frequencies:
            raise ValueError(f"not a DTMF symbol: {symbol!r}")

        low, high = self.symbol_frequencies[symbol]
        t = np.arange(self._num_samples(self.tone_duration)) / self.sample_rate
        tone = self.amplitude * (np.sin(2 * np.pi * low * t) + np.sin(2 * np.pi * high * t))
        return tone.astype(np.float32)

    def generate_message(
        self,
        digits: str,
        lead_in_sec: float = 0.5,
        lead_out_sec: float = 1.0
    ) -> np.ndarray:
        """Silence, one tone per symbol of `digits`, silence."""
        parts = [self.generate_silence(lead_in_sec)]
        parts.extend(self.generate_tone(symbol) for symbol in digits)
        parts.append(self.generate_silence(lead_out_sec))
        return np.concatenate(parts)

    def generate_payload(
        self,
        payload: bytes,
        lead_in_sec: float = 0.5,
        lead_out_sec: float = 1.0
    ) -> np.ndarray:
        """Full message audio for `payload`, checksum included."""
        return self.generate_message(encode_payload(payload), lead_in_sec, lead_out_sec)
