#!/usr/bin/env python3
"""
dtmf-decoder: DTMF Message Extraction

Main entry point. Reads a WAV recording (file or stdin), runs the decoder
pipeline and prints the first verified message to stdout.

Usage:
    # Decode a file
    dtmf-decoder message.wav

    # Decode from a pipe with detailed tracing
    sox input.mp3 -t wav - | dtmf-decoder --debug 2

    # Print every message in a long recording
    dtmf-decoder --all --config /etc/dtmf-decoder/config.toml session.wav

Configuration (TOML):
    [detector]
    tone_duration = 0.10
    splits = 4
    low_threshold = 1.0
    high_threshold = 0.1
    detect_factor = 2.5

    [protocol]
    debounce_run = 3
    blank_limit = 5
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

# Set up logging before imports that use it
logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    stream=sys.stderr
)
logger = logging.getLogger('dtmf-decoder')

from .detection.dtmf_constants import DetectorConfig, ProtocolConfig
from .engine.pipeline import DecoderPipeline, SourceExhaustedError
from .sources.audio_source import AudioSourceError
from .sources.wav_source import WavAudioSource

# --debug level -> logging level
DEBUG_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from TOML file."""
    if config_path:
        if Path(config_path).exists():
            with open(config_path, 'r') as f:
                return toml.load(f)
        logger.warning(f"Config file {config_path} not found, using defaults")

    # Empty tables: DetectorConfig/ProtocolConfig supply the defaults
    return {'detector': {}, 'protocol': {}}


def format_payload(payload: bytes) -> str:
    """Payload as printable text."""
    return payload.decode('utf-8', errors='replace')


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='dtmf-decoder: extract a CRC-checked DTMF message from audio',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    dtmf-decoder message.wav
    cat message.wav | dtmf-decoder --debug 1
    dtmf-decoder --all session.wav
        """
    )

    parser.add_argument(
        'wav',
        nargs='?',
        default='-',
        help='WAV file to decode (default: - for stdin)'
    )
    parser.add_argument(
        '--config', '-c',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--debug',
        type=int,
        choices=sorted(DEBUG_LEVELS),
        default=0,
        help='Debug level -- 0 for none, 1 for info, 2 for detailed (default: 0)'
    )
    parser.add_argument(
        '--all',
        action='store_true',
        help='Print every verified message until end of stream'
    )

    args = parser.parse_args(argv)

    logging.getLogger().setLevel(DEBUG_LEVELS[args.debug])

    try:
        config = load_config(args.config)
        detector_config = DetectorConfig.from_dict(config.get('detector', {}))
        protocol_config = ProtocolConfig.from_dict(config.get('protocol', {}))
    except (toml.TomlDecodeError, TypeError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        if args.wav == '-':
            source = WavAudioSource(sys.stdin.buffer)
        else:
            source = WavAudioSource(args.wav)
    except AudioSourceError as e:
        logger.error(str(e))
        return 1

    pipeline = DecoderPipeline(source, detector_config, protocol_config)

    if args.all:
        count = 0
        for payload in pipeline.payloads():
            print(format_payload(payload), flush=True)
            count += 1
        logger.info(f"Decoded {count} message(s)")
        return 0 if count else 1

    try:
        payload = pipeline.first_payload()
    except SourceExhaustedError as e:
        logger.error(str(e))
        return 1

    logger.info(f"Read full message {payload!r}")
    print(format_payload(payload))
    return 0


if __name__ == '__main__':
    sys.exit(main())
