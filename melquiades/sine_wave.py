"""Test tones for checking the audio output path."""

from __future__ import annotations

import logging
import math
import struct
from itertools import count
from typing import Optional

log = logging.getLogger(__name__)

SAMPLE_RATE = 44100
SINE_FREQ = 1000
AMPLITUDE = 32767
BUFFER_SIZE = 512
SWITCH_EVERY = 1000

_TWO_PI = 2.0 * math.pi


class SineWaveGenerator:
    """Produces a continuous sine tone as interleaved stereo 16-bit PCM."""

    def __init__(self, frequency: float = SINE_FREQ, sample_rate: int = SAMPLE_RATE,
                 amplitude: float = AMPLITUDE):
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        self.frequency = frequency
        self.sample_rate = sample_rate
        self.amplitude = amplitude
        self.phase = 0.0

    def generate(self, num_samples: int) -> bytes:
        """Return ``num_samples`` int16 values, the same tone on both channels.

        The phase carries over between calls so consecutive blocks join smoothly.
        """
        if num_samples < 0 or num_samples % 2:
            raise ValueError(f"sample count must be even and non-negative, got {num_samples}")
        increment = _TWO_PI * self.frequency / self.sample_rate
        values = []
        for _ in range(num_samples // 2):
            sample = int(math.sin(self.phase) * self.amplitude)
            values += (sample, sample)
            self.phase += increment
            if self.phase >= _TWO_PI:
                self.phase -= _TWO_PI
        return struct.pack(f"<{num_samples}h", *values)


def square_wave(num_samples: int) -> bytes:
    """Return a full-scale square wave whose level flips every 16 samples."""
    if num_samples < 0:
        raise ValueError(f"sample count must be non-negative, got {num_samples}")
    values = [32767 if (i // 16) % 2 else -32768 for i in range(num_samples)]
    return struct.pack(f"<{num_samples}h", *values)


def play_test_tone(output, blocks: Optional[int] = None,
                   switch_every: int = SWITCH_EVERY) -> int:
    """Write test blocks to ``output``, alternating sine and square waves.

    The waveform changes every ``switch_every`` blocks. With ``blocks`` left
    as None it runs until interrupted. Returns the number of blocks sent.
    """
    if switch_every <= 0:
        raise ValueError(f"switch_every must be positive, got {switch_every}")
    output.set_sample_rate(SAMPLE_RATE)
    log.info("Generating a %d Hz sine wave at full amplitude", SINE_FREQ)

    generator = SineWaveGenerator(SINE_FREQ, SAMPLE_RATE, AMPLITUDE)
    square = False
    counter = 0
    sent = 0
    ticks = count() if blocks is None else range(blocks)
    for _ in ticks:
        block = square_wave(BUFFER_SIZE) if square else generator.generate(BUFFER_SIZE)
        try:
            output.write(block)
        except OSError as exc:
            log.error("Error writing audio data: %s", exc)
        sent += 1
        counter += 1
        if counter >= switch_every:
            counter = 0
            square = not square
            log.info("Switching to %s", "square wave" if square else "sine wave")
    return sent