"""
Tone detection for dtmf-decoder.

Goertzel filter banks and the per-block DTMF tone classifier.
"""

from .goertzel import GoertzelFilterBank, FrequencyBucket
from .tone_classifier import ToneClassifier, select_frequency
from .dtmf_constants import DetectorConfig, ProtocolConfig, DTMF_GRID, NO_TONE

__all__ = [
    'GoertzelFilterBank', 'FrequencyBucket', 'ToneClassifier', 'select_frequency',
    'DetectorConfig', 'ProtocolConfig', 'DTMF_GRID', 'NO_TONE',
]
