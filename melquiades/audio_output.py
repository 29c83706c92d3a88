"""Audio output stage: runs PCM through the DSP and hands it to a sink."""

from __future__ import annotations

import logging
from typing import BinaryIO

from melquiades.audio_dsp import AudioDsp, DspConfig

log = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_GAIN_DB = 6.0


def volume_to_db(volume_percent: int) -> float:
    """Map a 0-100 % volume to a gain: 0 % -> -40 dB, 50 % -> 0 dB, 100 % -> +20 dB.

    Values above 100 are treated as 100.
    """
    if volume_percent < 0:
        raise ValueError(f"volume must not be negative, got {volume_percent}")
    volume_percent = min(volume_percent, 100)
    if volume_percent < 50:
        return -40.0 + volume_percent * 0.8
    return (volume_percent - 50) * 0.4


class AudioOutput:
    """Writes 16-bit stereo PCM to a binary sink, optionally through the DSP."""

    def __init__(self, sink: BinaryIO, sample_rate: int = DEFAULT_SAMPLE_RATE):
        self.sink = sink
        self.dsp = AudioDsp(sample_rate)
        self.sample_rate = sample_rate
        self.config = DspConfig(gain_db=DEFAULT_GAIN_DB)
        self.dsp_enabled = True
        self.closed = False
        log.info("Audio output ready at %d Hz, DSP gain %.1f dB",
                 sample_rate, self.config.gain_db)

    def __enter__(self) -> "AudioOutput":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def write(self, data) -> int:
        """Send a block of audio to the sink and return the number of bytes written."""
        if self.closed:
            raise RuntimeError("audio output is closed")
        payload = bytes(data)
        if self.dsp_enabled and payload:
            payload = self.dsp.process(payload, self.config)
        written = self.sink.write(payload)
        if written is None:
            written = len(payload)
        if written != len(payload):
            log.warning("Bytes written (%d) differs from length specified (%d)",
                        written, len(payload))
        return written

    def set_sample_rate(self, sample_rate: int) -> None:
        """Change the output sample rate and redesign the DSP filters for it."""
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        self.dsp.configure(sample_rate)
        self.sample_rate = sample_rate
        log.info("Sample rate set to %d Hz", sample_rate)

    def set_volume(self, volume_percent: int) -> float:
        """Set the overall gain from a percentage; returns the gain in dB."""
        volume_db = volume_to_db(volume_percent)
        self.config.gain_db = volume_db
        log.info("Volume set to %d%% (%.1f dB)", min(volume_percent, 100), volume_db)
        return volume_db

    def enable_dsp(self, enable: bool) -> None:
        """Switch DSP processing on or off; when off audio passes unchanged."""
        self.dsp_enabled = bool(enable)
        log.info("DSP %s", "enabled" if enable else "disabled")

    def set_eq(self, bass_db: float, mid_db: float, treble_db: float) -> None:
        """Set the three equaliser band gains in dB."""
        self.config.bass_gain_db = bass_db
        self.config.mid_gain_db = mid_db
        self.config.treble_gain_db = treble_db
        log.info("EQ set - Bass: %.1f dB, Mid: %.1f dB, Treble: %.1f dB",
                 bass_db, mid_db, treble_db)

    def set_channel_balance(self, left_gain_db: float, right_gain_db: float) -> None:
        """Give each channel its own gain in dB."""
        self.config.separate_channels = True
        self.config.left_gain_db = left_gain_db
        self.config.right_gain_db = right_gain_db
        log.info("Channel balance set - Left: %.1f dB, Right: %.1f dB",
                 left_gain_db, right_gain_db)

    def reset_dsp(self) -> None:
        """Restore every DSP setting to its neutral default."""
        self.config = DspConfig()
        log.info("DSP settings reset to defaults")

    def close(self) -> None:
        """Stop accepting audio."""
        if not self.closed:
            self.closed = True
            log.info("Audio output closed")