#!/usr/bin/env python3
"""
DTMF Tone Classifier - Per-Block Symbol Decisions

================================================================================
PURPOSE
================================================================================
Reduce each block of audio to at most one raw DTMF symbol. Two Goertzel
banks run side by side over the same samples, one over the low-group and one
over the high-group frequencies.

================================================================================
DECISION RULE
================================================================================
For each bank, with magnitudes m[i] and mean m̄:

    candidate(i)  ⇔  m[i] > threshold  AND  m[i] > m̄ · detect_factor

The LAST candidate in frequency order is selected, not the strongest. With a
detect factor of 2.5 over four buckets at most one bucket can qualify, so the
rule only matters when a smaller factor is configured.

If both banks select a frequency, the pair is looked up in the DTMF grid;
otherwise the block's symbol is NO_TONE ("").

Thresholds (defaults):
    low group:  1.0
    high group: 0.1
    factor:     2.5

================================================================================
BLOCK LENGTH
================================================================================
One block covers a quarter of the nominal 100 ms tone, so a tone yields three
or four blocks of the same symbol. The block length is not a power of two and
is not aligned to tone boundaries.
"""

import logging
from typing import Callable, Dict, Iterator, Mapping, Optional, Sequence

import numpy as np

from .dtmf_constants import (
    DTMF_GRID,
    DTMF_HIGH_FREQUENCIES,
    DTMF_LOW_FREQUENCIES,
    NO_TONE,
    DetectorConfig,
)
from .goertzel import GoertzelFilterBank
from ..sources.audio_source import AudioReadError, AudioSource, EndOfStreamError

logger = logging.getLogger(__name__)


def select_frequency(
    magnitudes: Sequence[float],
    frequencies: Sequence[float],
    threshold: float,
    detect_factor: float
) -> Optional[float]:
    """
    Pick the detected frequency of one bank.

    Args:
        magnitudes: Relative magnitudes in bank order
        frequencies: Frequencies matching `magnitudes`
        threshold: Absolute minimum magnitude
        detect_factor: Required ratio over the bank mean

    Returns:
        The last qualifying frequency in iteration order, or None
    """
    average = float(np.mean(magnitudes))
    selected = None
    for frequency, magnitude in zip(frequencies, magnitudes):
        if magnitude > threshold and magnitude > average * detect_factor:
            selected = frequency
    return selected


class ToneClassifier:
    """
    Turns fixed-size sample blocks into raw DTMF symbols.

    Usage:
        classifier = ToneClassifier(sample_rate=8000)
        symbol = classifier.classify_block(samples[:classifier.block_length])
    """

    def __init__(
        self,
        sample_rate: int,
        config: Optional[DetectorConfig] = None,
        low_frequencies: Sequence[int] = DTMF_LOW_FREQUENCIES,
        high_frequencies: Sequence[int] = DTMF_HIGH_FREQUENCIES,
        grid: Mapping[int, Mapping[int, str]] = DTMF_GRID
    ):
        """
        Args:
            sample_rate: Audio sample rate in Hz
            config: Thresholds and tone timing (defaults if None)
            low_frequencies: Row frequencies of the grid, in order
            high_frequencies: Column frequencies of the grid, in order
            grid: Mapping low -> high -> symbol
        """
        self.sample_rate = int(sample_rate)
        self.config = config or DetectorConfig()
        self.block_length = self.config.block_length(self.sample_rate)
        self.grid = grid

        self.low_bank = GoertzelFilterBank(self.sample_rate, self.block_length, low_frequencies)
        self.high_bank = GoertzelFilterBank(self.sample_rate, self.block_length, high_frequencies)

        self.stats: Dict[str, int] = {
            'blocks_read': 0,
            'read_errors': 0,
            'tones_detected': 0,
        }

        logger.info(
            f"ToneClassifier: sample_rate={self.sample_rate} Hz, "
            f"block_length={self.block_length} samples"
        )

    def classify_block(self, samples: np.ndarray) -> str:
        """
        Classify one block of samples.

        Returns:
            A DTMF symbol, or NO_TONE
        """
        self.low_bank.reset()
        self.high_bank.reset()
        self.low_bank.process_block(samples)
        self.high_bank.process_block(samples)

        lows = self.low_bank.compute_relative_magnitude()
        highs = self.high_bank.compute_relative_magnitude()

        low = select_frequency(
            lows, self.low_bank.frequencies,
            self.config.low_threshold, self.config.detect_factor
        )
        high = select_frequency(
            highs, self.high_bank.frequencies,
            self.config.high_threshold, self.config.detect_factor
        )

        symbol = NO_TONE
        if low is not None and high is not None:
            symbol = self.grid.get(int(low), {}).get(int(high), NO_TONE)

        logger.debug(
            f"lows={np.round(lows, 3).tolist()} highs={np.round(highs, 3).tolist()} "
            f"low_avg={float(np.mean(lows)):.3f} high_avg={float(np.mean(highs)):.3f} "
            f"low={low} high={high} res=<{symbol}>"
        )
        return symbol

    def _read_block(self, source: AudioSource) -> Optional[np.ndarray]:
        try:
            samples = source.read(self.block_length)
        except AudioReadError as e:
            self.stats['read_errors'] += 1
            logger.error(f"Audio read failed, skipping block: {e}")
            return None
        self.stats['blocks_read'] += 1
        return samples

    def _classify_and_count(self, samples: np.ndarray) -> str:
        symbol = self.classify_block(samples)
        if symbol != NO_TONE:
            self.stats['tones_detected'] += 1
        return symbol

    def run(self, source: AudioSource, emit: Callable[[str], None]):
        """
        Producer loop: read, classify and emit one symbol per block.

        Transient read errors skip the block. EndOfStreamError (and any other
        AudioSourceError) propagates and ends the loop.
        """
        logger.info(f"Reading {source.sample_rate} Hz audio in blocks of {self.block_length}")
        while True:
            samples = self._read_block(source)
            if samples is None:
                continue
            emit(self._classify_and_count(samples))

    def symbols(self, source: AudioSource) -> Iterator[str]:
        """Generator form of run() that stops cleanly at end of stream."""
        while True:
            try:
                samples = self._read_block(source)
            except EndOfStreamError as e:
                logger.info(f"Audio source exhausted: {e}")
                return
            if samples is None:
                continue
            yield self._classify_and_count(samples)

    def get_statistics(self) -> Dict[str, int]:
        """Block, read-error and detected-tone counts."""
        return dict(self.stats)
