"""
WAV and in-memory audio sources.

WavAudioSource parses the RIFF/WAV header with the standard wave module and
then reads PCM frames batch by batch, keeping the first channel and
normalizing it to float32. ArrayAudioSource serves an in-memory array
through the same AudioSource contract.
"""

import logging
import wave
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np

from .audio_source import AudioSource, AudioReadError, AudioSourceError, EndOfStreamError

logger = logging.getLogger(__name__)

# WAV PCM sample width (bytes) -> numpy dtype. 24-bit is widened to int32.
_PCM_DTYPES = {
    1: np.dtype(np.uint8),
    2: np.dtype('<i2'),
    3: np.dtype('<i4'),
    4: np.dtype('<i4'),
}


def decode_pcm(raw: bytes, sample_width: int) -> np.ndarray:
    """
    Interleaved little-endian PCM bytes as a flat integer array.

    8-bit samples stay unsigned. 24-bit samples are placed in the top three
    bytes of an int32 so they keep full-scale range.
    """
    if sample_width == 3:
        packed = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3)
        widened = np.zeros((len(packed), 4), dtype=np.uint8)
        widened[:, 1:] = packed
        return widened.reshape(-1).view('<i4')
    return np.frombuffer(raw, dtype=_PCM_DTYPES[sample_width])


def normalize_samples(data: np.ndarray) -> np.ndarray:
    """
    Convert PCM data to mono float32 in [-1, 1).

    Multi-channel input keeps channel 0. Unsigned 8-bit PCM is centred on
    128; signed integer PCM is scaled by its full-scale value; float data is
    passed through.
    """
    data = np.asarray(data)
    if data.ndim > 1:
        data = data[:, 0]

    if data.dtype == np.uint8:
        return (data.astype(np.float32) - 128.0) / 128.0
    if np.issubdtype(data.dtype, np.integer):
        full_scale = float(2 ** (8 * data.dtype.itemsize - 1))
        return (data.astype(np.float32) / full_scale).astype(np.float32)
    return data.astype(np.float32)


class ArrayAudioSource(AudioSource):
    """Serves batches from an in-memory sample array."""

    def __init__(self, samples: np.ndarray, sample_rate: int):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self._sample_rate = int(sample_rate)
        self.samples = np.asarray(samples, dtype=np.float32).ravel()
        self.position = 0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def duration_sec(self) -> float:
        return len(self.samples) / self._sample_rate

    def read(self, count: int) -> np.ndarray:
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        if self.position >= len(self.samples):
            raise EndOfStreamError(f"end of stream after {self.position} samples")

        batch = self.samples[self.position:self.position + count]
        self.position += len(batch)
        return batch


class WavAudioSource(AudioSource):
    """
    Streaming audio source over RIFF/WAV PCM data.

    The header is parsed once on construction; each read() then pulls only
    the requested number of frames from the underlying file, so a live pipe
    is decoded while it is still being written.

    Args:
        source: Path to a WAV file, or a binary stream positioned at the
            start of WAV data (stdin, a pipe, a socket file)
    """

    def __init__(self, source: Union[str, Path, BinaryIO]):
        if hasattr(source, 'read'):
            self.name = getattr(source, 'name', '<stream>')
            self._owns_file = False
        else:
            self.name = str(source)
            self._owns_file = True

        try:
            self._wav = wave.open(self.name if self._owns_file else source, 'rb')
        except (wave.Error, OSError, EOFError) as e:
            raise AudioSourceError(f"Cannot read WAV data from {self.name}: {e}") from e

        self.channels = self._wav.getnchannels()
        self.sample_width = self._wav.getsampwidth()
        self._sample_rate = self._wav.getframerate()
        self.position = 0

        if self.sample_width not in _PCM_DTYPES:
            self.close()
            raise AudioSourceError(
                f"Unsupported sample width in {self.name}: {self.sample_width} bytes"
            )
        if self._sample_rate <= 0:
            self.close()
            raise AudioSourceError(f"Invalid sample rate in {self.name}: {self._sample_rate}")

        logger.info(
            f"Opened {self.name}: {self._sample_rate} Hz, {self.channels} channel(s), "
            f"{8 * self.sample_width}-bit PCM"
        )

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def read(self, count: int) -> np.ndarray:
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")

        frame_size = self.channels * self.sample_width
        try:
            raw = self._wav.readframes(count)
        except (wave.Error, OSError) as e:
            raise AudioReadError(f"Read from {self.name} failed: {e}") from e

        # A stream cut mid-frame leaves a partial frame at the end
        raw = raw[:len(raw) - len(raw) % frame_size]
        if not raw:
            raise EndOfStreamError(f"end of stream after {self.position} samples")

        frames = len(raw) // frame_size
        self.position += frames
        return normalize_samples(
            decode_pcm(raw, self.sample_width).reshape(frames, self.channels)
        )

    def close(self):
        """Close the WAV reader (and the file, when opened by path)."""
        self._wav.close()
