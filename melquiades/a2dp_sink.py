"""Bluetooth audio sink logic: DSP presets and A2DP stream events."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import NamedTuple, Union

from melquiades.audio_output import AudioOutput

log = logging.getLogger(__name__)

DEFAULT_VOLUME = 75
VOLUME_STEP = 5
BALANCE_STEP = 0.1
BALANCE_ATTENUATION_DB = 10.0
DEFAULT_SBC_SAMPLE_RATE = 16000


class _PresetGains(NamedTuple):
    name: str
    bass: float
    mid: float
    treble: float


class EqPreset(enum.IntEnum):
    """Equaliser presets, cycled in this order."""

    FLAT = 0
    BASS_BOOST = 1
    MID_BOOST = 2
    TREBLE_BOOST = 3
    VOCAL = 4

    @property
    def gains(self) -> _PresetGains:
        """Display name and bass, mid and treble gains in dB."""
        return _PRESETS[self]


_PRESETS = {
    EqPreset.FLAT: _PresetGains("Plano", 0.0, 0.0, 0.0),
    EqPreset.BASS_BOOST: _PresetGains("Refuerzo Bajo", 10.0, 0.0, -2.0),
    EqPreset.MID_BOOST: _PresetGains("Refuerzo Medio", -2.0, 8.0, -2.0),
    EqPreset.TREBLE_BOOST: _PresetGains("Refuerzo Agudo", -2.0, 0.0, 10.0),
    EqPreset.VOCAL: _PresetGains("Vocal", -3.0, 6.0, 3.0),
}


class ConnectionState(enum.IntEnum):
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    DISCONNECTING = 3

    @property
    def label(self) -> str:
        return ("Desconectado", "Conectando", "Conectado", "Desconectando")[self]


class AudioState(enum.IntEnum):
    SUSPENDED = 0
    STOPPED = 1
    STARTED = 2

    @property
    def label(self) -> str:
        return ("Suspendido", "Parado", "Iniciado")[self]


def sample_rate_from_sbc(octet0: int) -> int:
    """Read the sample rate from the first octet of an SBC codec description."""
    if octet0 & (1 << 6):
        return 32000
    if octet0 & (1 << 5):
        return 44100
    if octet0 & (1 << 4):
        return 48000
    return DEFAULT_SBC_SAMPLE_RATE


@dataclass
class _DspSettings:
    enabled: bool = True
    eq_preset: EqPreset = EqPreset.FLAT
    volume: int = DEFAULT_VOLUME
    balance: float = 0.0


class DspController:
    """User-facing DSP settings (preset, volume, balance) applied to an output."""

    def __init__(self, output: AudioOutput):
        self.output = output
        self._settings = _DspSettings()

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    @property
    def eq_preset(self) -> EqPreset:
        return self._settings.eq_preset

    @property
    def volume(self) -> int:
        return self._settings.volume

    @property
    def balance(self) -> float:
        return self._settings.balance

    def apply(self) -> None:
        """Push every current setting to the audio output."""
        settings = self._settings
        self.output.enable_dsp(settings.enabled)

        gains = settings.eq_preset.gains
        self.output.set_eq(gains.bass, gains.mid, gains.treble)
        log.info("Applying EQ preset: %s", gains.name)

        self.output.set_volume(settings.volume)

        balance = settings.balance
        if balance < 0:
            self.output.set_channel_balance(0.0, balance * -BALANCE_ATTENUATION_DB)
        elif balance > 0:
            self.output.set_channel_balance(balance * -BALANCE_ATTENUATION_DB, 0.0)
        else:
            self.output.set_channel_balance(0.0, 0.0)

    def set_dsp_enabled(self, enabled: bool) -> None:
        self._settings.enabled = bool(enabled)
        self.apply()
        log.info("DSP %s", "enabled" if enabled else "disabled")

    def set_eq_preset(self, preset) -> None:
        """Select an equaliser preset; raises ValueError for an unknown one."""
        preset = EqPreset(preset)
        self._settings.eq_preset = preset
        self.apply()
        log.info("EQ preset changed to: %s", preset.gains.name)

    def set_volume(self, volume: int) -> None:
        """Set volume as a percentage; values above 100 become 100."""
        if volume < 0:
            raise ValueError(f"volume must not be negative, got {volume}")
        volume = min(int(volume), 100)
        self._settings.volume = volume
        self.apply()
        log.info("Volume set: %d%%", volume)

    def set_balance(self, balance: float) -> None:
        """Set balance from -1.0 (left) to 1.0 (right); out-of-range values are clamped."""
        balance = min(1.0, max(-1.0, float(balance)))
        self._settings.balance = balance
        self.apply()
        if balance < 0:
            log.info("Balance set: %.1f%% (towards left)", balance * -100.0)
        elif balance > 0:
            log.info("Balance set: %.1f%% (towards right)", balance * 100.0)
        else:
            log.info("Balance set: centred")

    def toggle_enabled(self) -> None:
        self.set_dsp_enabled(not self._settings.enabled)

    def next_eq_preset(self) -> None:
        self.set_eq_preset((self._settings.eq_preset + 1) % len(EqPreset))

    def volume_up(self) -> None:
        self.set_volume(min(self._settings.volume + VOLUME_STEP, 100))

    def volume_down(self) -> None:
        self.set_volume(max(self._settings.volume - VOLUME_STEP, 0))

    def balance_left(self) -> None:
        self.set_balance(max(self._settings.balance - BALANCE_STEP, -1.0))

    def balance_right(self) -> None:
        self.set_balance(min(self._settings.balance + BALANCE_STEP, 1.0))

    def balance_center(self) -> None:
        self.set_balance(0.0)


def _format_address(address: Union[bytes, bytearray, str, None]) -> str:
    if address is None:
        return "??:??:??:??:??:??"
    if isinstance(address, str):
        return address
    return ":".join(f"{octet:02x}" for octet in address)


class A2dpSink:
    """Handles A2DP sink events and routes decoded audio to the output."""

    def __init__(self, output: AudioOutput):
        self.output = output
        self.dsp = DspController(output)
        self.connection_state = ConnectionState.DISCONNECTED
        self.audio_state = AudioState.STOPPED
        self.packet_count = 0
        self.dsp.apply()
        log.info("A2DP sink ready, waiting for a connection")

    def on_connection_state(self, state, remote_address=None) -> None:
        state = ConnectionState(state)
        log.info("A2DP connection state changed: %s, [%s]",
                 state.label, _format_address(remote_address))
        self.connection_state = state
        if state is ConnectionState.DISCONNECTED:
            self.packet_count = 0

    def on_audio_state(self, state) -> None:
        state = AudioState(state)
        log.info("A2DP audio state changed: %s", state.label)
        self.audio_state = state

    def on_audio_config(self, sbc_octet0: int) -> int:
        """Reconfigure the output for the stream's sample rate and return it."""
        sample_rate = sample_rate_from_sbc(sbc_octet0)
        log.info("Configure audio player: %d", sample_rate)
        self.output.set_sample_rate(sample_rate)
        return sample_rate

    def on_audio_data(self, data) -> int:
        """Forward a block of decoded PCM to the output; returns bytes written."""
        self.packet_count += 1
        return self.output.write(data)