#!/usr/bin/env python3
"""
Goertzel Filter Bank - Single-Bin Spectral Energy Estimation

================================================================================
PURPOSE
================================================================================
Estimate the signal energy at a handful of fixed frequencies over a block of
samples. For eight DTMF frequencies this is far cheaper than a full FFT, and
the block length does not have to be a power of two.

================================================================================
THEORY
================================================================================
For a block of N samples and target frequency f at sample rate fs:

    k     = int(0.5 + N·f / fs)        (nearest DFT bin)
    ω     = 2π·k / N
    coeff = 2·cos(ω)

Each sample x[n] drives the second-order recursion:

    Q0 = coeff·Q1 - Q2 + x[n]
    Q2 = Q1
    Q1 = Q0

After the block, the relative magnitude squared is:

    |X[k]|² = Q1² + Q2² - Q1·Q2·coeff

This omits the real/imaginary reconstruction and is only meaningful for
comparing buckets against each other and against a threshold. The basic form

    real = Q1 - Q2·cos(ω)
    imag = Q2·sin(ω)

is available through compute_real_imag() when phase is needed.

All arithmetic is single precision (np.float32).

REFERENCE: Banks, K. (2002). "The Goertzel Algorithm," Embedded Systems
           Programming.

================================================================================
USAGE
================================================================================
    bank = GoertzelFilterBank(8000, 200, [697, 770, 852, 941])

    bank.reset()
    bank.process_block(samples)        # or process_sample() per sample
    magnitudes = bank.compute_relative_magnitude()
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
from scipy.signal import lfilter, lfiltic

logger = logging.getLogger(__name__)

_ZERO = np.float32(0.0)


@dataclass
class FrequencyBucket:
    """
    Filter state for one monitored frequency.

    target_frequency, k, coeff, sine and cosine are fixed at construction;
    q1/q2 are the recursion state and the remaining fields hold the latest
    block result.
    """
    target_frequency: float
    k: int
    coeff: np.float32
    sine: np.float32
    cosine: np.float32
    q1: np.float32 = _ZERO
    q2: np.float32 = _ZERO
    magnitude_squared: np.float32 = _ZERO
    real_part: np.float32 = _ZERO
    imag_part: np.float32 = _ZERO


class GoertzelFilterBank:
    """
    Bank of Goertzel filters sharing one sample rate and block length.

    Bucket order follows the frequency list given at construction; callers
    map results back to frequencies by position.
    """

    def __init__(self, sample_rate: int, block_length: int, frequencies: Sequence[float]):
        """
        Precompute filter constants for every frequency.

        Args:
            sample_rate: Sample rate in Hz
            block_length: Samples per block (N)
            frequencies: Ordered target frequencies in Hz
        """
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if block_length <= 0:
            raise ValueError(f"block_length must be positive, got {block_length}")
        if not frequencies:
            raise ValueError("at least one frequency is required")

        self.sample_rate = int(sample_rate)
        self.block_length = int(block_length)
        self.buckets: List[FrequencyBucket] = [self._make_bucket(f) for f in frequencies]

        logger.debug(f"Goertzel bank: sample_rate={self.sample_rate} Hz, N={self.block_length}")
        for bucket in self.buckets:
            logger.debug(
                f"  {bucket.target_frequency:.1f} Hz: k={bucket.k}, coeff={bucket.coeff:.6f}"
            )

    def _make_bucket(self, frequency: float) -> FrequencyBucket:
        float_n = np.float32(self.block_length)
        target = np.float32(frequency)
        k = int(np.float32(0.5) + (float_n * target) / np.float32(self.sample_rate))
        omega = (np.float32(2.0 * np.pi) * np.float32(k)) / float_n
        sine = np.float32(np.sin(np.float64(omega)))
        cosine = np.float32(np.cos(np.float64(omega)))
        return FrequencyBucket(
            target_frequency=float(frequency),
            k=k,
            coeff=np.float32(2.0) * cosine,
            sine=sine,
            cosine=cosine,
        )

    @property
    def frequencies(self) -> Tuple[float, ...]:
        return tuple(b.target_frequency for b in self.buckets)

    def reset(self):
        """Clear the recursion state. Call before every block."""
        for bucket in self.buckets:
            bucket.q1 = _ZERO
            bucket.q2 = _ZERO

    def process_sample(self, sample: float):
        """Run one sample through every filter."""
        x = np.float32(sample)
        for bucket in self.buckets:
            q0 = bucket.coeff * bucket.q1 - bucket.q2 + x
            bucket.q2 = bucket.q1
            bucket.q1 = q0

    def process_block(self, samples: np.ndarray):
        """
        Run a whole block through every filter.

        Equivalent to process_sample() on each sample in order, continuing
        from the current q1/q2 state, but evaluated as an IIR filter:

            y[n] = x[n] + coeff·y[n-1] - y[n-2]
        """
        x = np.asarray(samples, dtype=np.float32).ravel()
        if x.size == 0:
            return

        for bucket in self.buckets:
            b = np.array([1.0], dtype=np.float32)
            a = np.array([1.0, -bucket.coeff, 1.0], dtype=np.float32)
            zi = lfiltic(b, a, [bucket.q1, bucket.q2]).astype(np.float32)
            y, _ = lfilter(b, a, x, zi=zi)
            history = np.concatenate(([bucket.q2, bucket.q1], y.astype(np.float32)))
            bucket.q1 = np.float32(history[-1])
            bucket.q2 = np.float32(history[-2])

    def compute_relative_magnitude(self) -> np.ndarray:
        """
        Compute each bucket's relative magnitude squared.

        Returns:
            float32 array of magnitudes in bucket order
        """
        for bucket in self.buckets:
            bucket.magnitude_squared = (
                bucket.q1 * bucket.q1
                + bucket.q2 * bucket.q2
                - bucket.q1 * bucket.q2 * bucket.coeff
            )
        return np.array([b.magnitude_squared for b in self.buckets], dtype=np.float32)

    def compute_real_imag(self) -> np.ndarray:
        """
        Compute the complex DFT bin value for each bucket (basic Goertzel).

        Returns:
            complex64 array in bucket order
        """
        for bucket in self.buckets:
            bucket.real_part = bucket.q1 - bucket.q2 * bucket.cosine
            bucket.imag_part = bucket.q2 * bucket.sine
        return np.array(
            [complex(b.real_part, b.imag_part) for b in self.buckets],
            dtype=np.complex64,
        )
