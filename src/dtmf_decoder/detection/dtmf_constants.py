#!/usr/bin/env python3
"""
DTMF Shared Constants - Keypad Grid and Detector Parameters

================================================================================
PURPOSE
================================================================================
Single source of truth for the DTMF frequency grid and the numeric thresholds
used by the tone classifier and the message protocol stages.

The grid is part of the signalling standard and never changes. Thresholds and
timing live in frozen dataclasses so they can be injected into components
(and overridden from the TOML configuration) without module-level state.

================================================================================
DTMF KEYPAD
================================================================================
Each symbol is the sum of one low-group and one high-group sine tone:

              1209 Hz   1336 Hz   1477 Hz   1633 Hz
    697 Hz       1         2         3         A
    770 Hz       4         5         6         B
    852 Hz       7         8         9         C
    941 Hz       *         0         #         D

REFERENCE: ITU-T Recommendation Q.23, "Technical features of push-button
           telephone sets."

================================================================================
DETECTION TIMING
================================================================================
A protocol tone lasts TONE_DURATION (100 ms). The classifier splits each tone
into SPLITS (4) blocks so that at least three blocks fall entirely inside any
tone regardless of alignment:

    block_length = int((sample_rate // splits) * tone_duration)

    8000 Hz  -> 200 samples (25 ms)
    44100 Hz -> 1102 samples
"""

from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

# =============================================================================
# DTMF GRID
# =============================================================================

DTMF_LOW_FREQUENCIES: Tuple[int, ...] = (697, 770, 852, 941)
DTMF_HIGH_FREQUENCIES: Tuple[int, ...] = (1209, 1336, 1477, 1633)

# Empty symbol: no valid tone pair in the block
NO_TONE = ""

DTMF_GRID: Mapping[int, Mapping[int, str]] = MappingProxyType({
    697: MappingProxyType({1209: "1", 1336: "2", 1477: "3", 1633: "A"}),
    770: MappingProxyType({1209: "4", 1336: "5", 1477: "6", 1633: "B"}),
    852: MappingProxyType({1209: "7", 1336: "8", 1477: "9", 1633: "C"}),
    941: MappingProxyType({1209: "*", 1336: "0", 1477: "#", 1633: "D"}),
})

DTMF_SYMBOL_FREQUENCIES: Mapping[str, Tuple[int, int]] = MappingProxyType({
    symbol: (low, high)
    for low, row in DTMF_GRID.items()
    for high, symbol in row.items()
})


# =============================================================================
# CONFIGURATION
# =============================================================================

def _filter_known(cls, values: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(cls)}
    return {key: value for key, value in values.items() if key in known}


@dataclass(frozen=True)
class DetectorConfig:
    """
    Tone classifier parameters.

    Attributes:
        tone_duration: Nominal length of one protocol tone (seconds)
        splits: Number of classifier blocks per tone
        low_threshold: Minimum relative magnitude for a low-group tone
        high_threshold: Minimum relative magnitude for a high-group tone
        detect_factor: Required ratio of a tone's magnitude to the bank mean
    """
    tone_duration: float = 0.10
    splits: int = 4
    low_threshold: float = 1.0
    high_threshold: float = 0.1
    detect_factor: float = 2.5

    def __post_init__(self):
        if self.tone_duration <= 0:
            raise ValueError(f"tone_duration must be positive, got {self.tone_duration}")
        if self.splits <= 0:
            raise ValueError(f"splits must be positive, got {self.splits}")
        if self.detect_factor <= 0:
            raise ValueError(f"detect_factor must be positive, got {self.detect_factor}")
        if self.low_threshold < 0 or self.high_threshold < 0:
            raise ValueError("thresholds must not be negative")

    def block_length(self, sample_rate: int) -> int:
        """Samples per classifier block (a quarter tone by default)."""
        return int((sample_rate // self.splits) * self.tone_duration)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'DetectorConfig':
        """Build from a [detector] config table, ignoring unknown keys."""
        return cls(**_filter_known(cls, values))


@dataclass(frozen=True)
class ProtocolConfig:
    """
    Debouncer and framer parameters.

    Attributes:
        debounce_run: Identical raw symbols needed before one is confirmed
        blank_limit: Accumulated blank symbols that terminate a message
    """
    debounce_run: int = 3
    blank_limit: int = 5

    def __post_init__(self):
        if self.debounce_run <= 0:
            raise ValueError(f"debounce_run must be positive, got {self.debounce_run}")
        if self.blank_limit <= 0:
            raise ValueError(f"blank_limit must be positive, got {self.blank_limit}")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'ProtocolConfig':
        """Build from a [protocol] config table, ignoring unknown keys."""
        return cls(**_filter_known(cls, values))
