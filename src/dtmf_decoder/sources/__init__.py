"""Audio sources - WAV files, in-memory arrays, and the source interface."""

from .audio_source import AudioSource, AudioSourceError, AudioReadError, EndOfStreamError
from .wav_source import ArrayAudioSource, WavAudioSource, decode_pcm, normalize_samples

__all__ = [
    'AudioSource', 'AudioSourceError', 'AudioReadError', 'EndOfStreamError',
    'ArrayAudioSource', 'WavAudioSource', 'decode_pcm', 'normalize_samples',
]
