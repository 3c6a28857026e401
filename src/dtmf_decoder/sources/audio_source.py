"""
Audio Source Interface

Defines the contract between an audio provider and the tone classifier.
The classifier only needs the stream's sample rate and successive batches of
normalized float samples; where they come from is up to the implementation.
"""

from abc import ABC, abstractmethod

import numpy as np


class AudioSourceError(Exception):
    """Base class for audio source failures."""


class AudioReadError(AudioSourceError):
    """A single read failed; the next read may succeed."""


class EndOfStreamError(AudioSourceError):
    """The stream is exhausted or unrecoverable. Ends processing."""


class AudioSource(ABC):
    """
    Interface for sample providers.

    Implementations must raise AudioReadError for transient failures and
    EndOfStreamError once no more samples will ever be produced.
    """

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """Stream sample rate in Hz."""
        pass

    @abstractmethod
    def read(self, count: int) -> np.ndarray:
        """
        Read the next batch of samples.

        Args:
            count: Number of samples requested

        Returns:
            float32 array of up to `count` samples in [-1, 1). Only the
            final batch of a stream may be shorter than requested.

        Raises:
            AudioReadError: transient failure, caller may retry
            EndOfStreamError: no further samples available
        """
        pass
