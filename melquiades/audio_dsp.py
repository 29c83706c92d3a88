"""Three-band equaliser with gain and channel balance for 16-bit stereo PCM."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass

MAX_GAIN_DB = 20.0
MIN_GAIN_DB = -20.0


def db_to_linear(db: float) -> float:
    """Convert a gain in decibels to a linear amplitude factor."""
    return 10.0 ** (db / 20.0)


def _clamped_gain(db: float) -> float:
    return db_to_linear(min(max(db, MIN_GAIN_DB), MAX_GAIN_DB))


class FilterType(enum.IntEnum):
    LOWPASS = 0
    BANDPASS = 1
    HIGHPASS = 2


@dataclass
class DspConfig:
    """Equaliser settings; every gain is in dB and clamped to [-20, 20]."""

    gain_db: float = 0.0
    bass_gain_db: float = 0.0
    mid_gain_db: float = 0.0
    treble_gain_db: float = 0.0
    separate_channels: bool = False
    left_gain_db: float = 0.0
    right_gain_db: float = 0.0


@dataclass
class BiquadFilter:
    """Second-order IIR filter with normalised coefficients (a0 == 1)."""

    b0: float = 1.0
    b1: float = 0.0
    b2: float = 0.0
    a1: float = 0.0
    a2: float = 0.0
    x1: float = 0.0
    x2: float = 0.0
    y1: float = 0.0
    y2: float = 0.0

    @classmethod
    def design(cls, filter_type, freq_hz, q, gain_db, sample_rate) -> "BiquadFilter":
        """Build a low-pass, band-pass or high-pass filter."""
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        if q <= 0:
            raise ValueError(f"Q must be positive, got {q}")
        filter_type = FilterType(filter_type)
        omega = 2.0 * math.pi * freq_hz / sample_rate
        sn = math.sin(omega)
        cs = math.cos(omega)
        alpha = sn / (2.0 * q)
        amp = 10.0 ** (gain_db / 40.0)

        a0 = 1.0 + alpha
        a1 = -2.0 * cs
        a2 = 1.0 - alpha
        if filter_type is FilterType.LOWPASS:
            b0, b1, b2 = (1.0 - cs) / 2.0, 1.0 - cs, (1.0 - cs) / 2.0
        elif filter_type is FilterType.BANDPASS:
            b0, b1, b2 = alpha * amp, 0.0, -alpha * amp
        else:
            b0, b1, b2 = (1.0 + cs) / 2.0, -(1.0 + cs), (1.0 + cs) / 2.0

        return cls(b0=b0 / a0, b1=b1 / a0, b2=b2 / a0, a1=a1 / a0, a2=a2 / a0)

    def process(self, sample: float) -> float:
        """Filter one sample and advance the filter's history."""
        output = (self.b0 * sample + self.b1 * self.x1 + self.b2 * self.x2
                  - self.a1 * self.y1 - self.a2 * self.y2)
        self.x2, self.x1 = self.x1, sample
        self.y2, self.y1 = self.y1, output
        return output

    def reset(self) -> None:
        """Clear the filter's input and output history."""
        self.x1 = self.x2 = self.y1 = self.y2 = 0.0


def _band_filters(sample_rate: int) -> tuple[BiquadFilter, BiquadFilter, BiquadFilter]:
    return (
        BiquadFilter.design(FilterType.LOWPASS, 250.0, 0.707, 0.0, sample_rate),
        BiquadFilter.design(FilterType.BANDPASS, 1000.0, 1.0, 0.0, sample_rate),
        BiquadFilter.design(FilterType.HIGHPASS, 4000.0, 0.707, 0.0, sample_rate),
    )


class AudioDsp:
    """Stateful processor for interleaved little-endian 16-bit stereo audio."""

    def __init__(self, sample_rate: int = 44100):
        self.configure(sample_rate)

    def configure(self, sample_rate: int) -> None:
        """Redesign all filters for a new sample rate, clearing their history."""
        self.sample_rate = sample_rate
        self.left = _band_filters(sample_rate)
        self.right = _band_filters(sample_rate)

    def process(self, data, config: DspConfig) -> bytes:
        """Return processed audio of the same length as ``data``."""
        if data is None or config is None:
            raise TypeError("data and config are required")
        buf = bytes(data)
        count = len(buf) // 2
        samples = struct.unpack_from(f"<{count}h", buf)

        gain = _clamped_gain(config.gain_db)
        bass_gain = _clamped_gain(config.bass_gain_db)
        mid_gain = _clamped_gain(config.mid_gain_db)
        treble_gain = _clamped_gain(config.treble_gain_db)
        if config.separate_channels:
            left_gain = _clamped_gain(config.left_gain_db)
            right_gain = _clamped_gain(config.right_gain_db)
        else:
            left_gain = right_gain = 1.0

        chains = ((self.left, gain * left_gain), (self.right, gain * right_gain))
        out = []
        for index, sample in enumerate(samples):
            (bass, mid, treble), channel_gain = chains[index % 2]
            x = sample / 32768.0
            y = (bass.process(x) * bass_gain
                 + mid.process(x) * mid_gain
                 + treble.process(x) * treble_gain) * channel_gain
            y = min(1.0, max(-1.0, y))
            out.append(int(y * 32767.0))

        return struct.pack(f"<{count}h", *out) + buf[count * 2:]