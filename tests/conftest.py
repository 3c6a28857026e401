"""
Pytest configuration and fixtures for dtmf-decoder tests.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture
def sample_rate():
    """Telephony sample rate: 200-sample blocks, 800-sample tones."""
    return 8000


@pytest.fixture
def block_length(sample_rate):
    """Classifier block length at the default 100 ms tone / 4 splits."""
    return 200


@pytest.fixture
def generator(sample_rate):
    """DTMF test signal generator at the test sample rate."""
    from dtmf_decoder.detection.dtmf_test_signal import DTMFTestSignalGenerator
    return DTMFTestSignalGenerator(sample_rate=sample_rate)


@pytest.fixture
def sine():
    """Factory for a float32 sine block."""
    import numpy as np

    def make(frequency, num_samples, sample_rate, amplitude=0.5):
        t = np.arange(num_samples) / sample_rate
        return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)

    return make
