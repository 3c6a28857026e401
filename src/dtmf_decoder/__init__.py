"""
dtmf-decoder: DTMF Message Extraction from Audio

Finds a short message sent as a sequence of DTMF tones inside an audio
recording, checks its CRC-8 and returns the payload.

Architecture:
    WAV/stdin → Goertzel banks → tone classifier → debouncer → framer
              → CRC-8 verifier → stdout

Each stage after the audio reader runs in its own thread, connected by
rendezvous handoffs.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .detection.dtmf_constants import DetectorConfig, ProtocolConfig
from .engine.pipeline import DecoderPipeline, SourceExhaustedError
from .sources.wav_source import WavAudioSource, ArrayAudioSource

__all__ = [
    "DetectorConfig",
    "ProtocolConfig",
    "DecoderPipeline",
    "SourceExhaustedError",
    "WavAudioSource",
    "ArrayAudioSource",
    "__version__",
]
