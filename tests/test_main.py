"""
Tests for the command-line entry point and configuration loading.
"""

import numpy as np
import pytest
from scipy.io import wavfile


@pytest.fixture
def message_wav(tmp_path, generator):
    """Write an int16 WAV containing the payload b"hi"."""
    path = tmp_path / "message.wav"
    audio = generator.generate_payload(b"hi")
    wavfile.write(str(path), generator.sample_rate, (audio * 32767).astype(np.int16))
    return path


@pytest.fixture
def silent_wav(tmp_path):
    path = tmp_path / "silence.wav"
    wavfile.write(str(path), 8000, np.zeros(8000, dtype=np.int16))
    return path


class TestLoadConfig:
    """Test TOML configuration loading."""

    def test_defaults(self):
        """Verify no file yields empty tables that map onto the dataclass defaults."""
        from dtmf_decoder.detection.dtmf_constants import DetectorConfig, ProtocolConfig
        from dtmf_decoder.main import load_config

        config = load_config(None)
        assert config == {'detector': {}, 'protocol': {}}
        assert DetectorConfig.from_dict(config['detector']) == DetectorConfig()
        assert ProtocolConfig.from_dict(config['protocol']).blank_limit == 5

    def test_missing_file_uses_defaults(self, tmp_path):
        """Verify a nonexistent path falls back to defaults."""
        from dtmf_decoder.main import load_config

        assert load_config(str(tmp_path / "nope.toml")) == load_config(None)

    def test_reads_toml(self, tmp_path):
        """Verify values are read from the file and map onto the dataclasses."""
        from dtmf_decoder.detection.dtmf_constants import DetectorConfig, ProtocolConfig
        from dtmf_decoder.main import load_config

        path = tmp_path / "config.toml"
        path.write_text(
            "[detector]\n"
            "detect_factor = 3.0\n"
            "unknown_key = 1\n"
            "\n"
            "[protocol]\n"
            "blank_limit = 8\n"
        )

        config = load_config(str(path))
        detector = DetectorConfig.from_dict(config['detector'])
        protocol = ProtocolConfig.from_dict(config['protocol'])

        assert detector.detect_factor == 3.0
        assert detector.low_threshold == 1.0
        assert protocol.blank_limit == 8
        assert protocol.debounce_run == 3

    def test_invalid_values_rejected(self):
        """Verify non-positive settings raise ValueError."""
        from dtmf_decoder.detection.dtmf_constants import DetectorConfig, ProtocolConfig

        with pytest.raises(ValueError):
            DetectorConfig.from_dict({'splits': 0})
        with pytest.raises(ValueError):
            ProtocolConfig.from_dict({'blank_limit': -1})


class TestMain:
    """Test the CLI end to end."""

    def test_decodes_file(self, message_wav, capsys):
        """Verify the payload is printed and exit status is 0."""
        from dtmf_decoder.main import main

        assert main([str(message_wav)]) == 0
        assert capsys.readouterr().out == "hi\n"

    def test_all_mode(self, message_wav, capsys):
        """Verify --all prints every message."""
        from dtmf_decoder.main import main

        assert main(['--all', str(message_wav)]) == 0
        assert capsys.readouterr().out == "hi\n"

    def test_no_message(self, silent_wav, capsys):
        """Verify exit status 1 when the stream holds no message."""
        from dtmf_decoder.main import main

        assert main([str(silent_wav)]) == 1
        assert capsys.readouterr().out == ""

    def test_unreadable_input(self, tmp_path):
        """Verify exit status 1 for a file that is not WAV."""
        from dtmf_decoder.main import main

        path = tmp_path / "bad.wav"
        path.write_bytes(b"garbage")
        assert main([str(path)]) == 1

    def test_invalid_config(self, tmp_path, message_wav):
        """Verify exit status 1 for an invalid configuration value."""
        from dtmf_decoder.main import main

        config = tmp_path / "config.toml"
        config.write_text("[protocol]\nblank_limit = 0\n")
        assert main(['--config', str(config), str(message_wav)]) == 1

    def test_debug_level_sets_logging(self, message_wav):
        """Verify --debug 2 enables DEBUG on the root logger."""
        import logging
        from dtmf_decoder.main import main

        root = logging.getLogger()
        previous = root.level
        try:
            assert main(['--debug', '2', str(message_wav)]) == 0
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)
