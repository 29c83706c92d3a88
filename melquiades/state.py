"""Shared runtime state of the deck: streaming flags and background tasks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

_COMMAND_SUMMARY: tuple[tuple[str, str], ...] = (
    ("led_board start", "Iniciar LED"),
    ("led_board stop", "Detener LED"),
    ("sensors start", "Iniciamos lectura de sensores"),
    ("sensors stop", "Detenemos lectura de sensores"),
    ("set_volume 70", "Definimos volumen del dispositivo"),
    ("eq flat", "Cambiamos ecualizacion a defecto, flat"),
    ("eq bass_boost", "Cambiamos ecualizacion para bajos, bass_boost"),
    ("eq mid_boost", "Cambiamos ecualizacion a frecuencias medias, mid_boost"),
    ("eq treble_boost", "Cambiamos ecualizacion a treble, treble_boost"),
    ("eq vocal", "Cambiamos ecualizacion a vocal, vocal"),
    (
        "headphone_balance -0.2",
        "Cambiamos balance de los audifonos, desplazamos a izquierda o derecha",
    ),
    ("dsp enabled", "Activamos DSP, filtrado de audio"),
    ("dsp disabled", "Desactivamos DSP, dejamos audio como venga del sistema"),
    ("status", "Estado de variables y tasks"),
    ("help", "Comando de ayuda, desplegamos comandos disponibles"),
)

HELP_TEXT = "Comandos disponibles:\r\n" + "".join(
    f"  {usage} - {summary}\r\n" for usage, summary in _COMMAND_SUMMARY
)


class TaskHandle(Protocol):
    """A running background task that can be cancelled."""

    def cancel(self) -> object:
        ...


@dataclass
class DeckState:
    """Which shells receive sensor data and which background tasks run."""

    sensors_streaming_bt: bool = False
    sensors_streaming_uart: bool = False
    led_task: Optional[TaskHandle] = None
    pot_task: Optional[TaskHandle] = None
    btn_task: Optional[TaskHandle] = None

    @property
    def streaming(self) -> bool:
        """True while any shell is receiving sensor data."""
        return self.sensors_streaming_bt or self.sensors_streaming_uart

    def stop_sensor_tasks(self) -> None:
        """Cancel the potentiometer and button reader tasks, if running."""
        for attr in ("pot_task", "btn_task"):
            task = getattr(self, attr)
            if task is not None:
                task.cancel()
                setattr(self, attr, None)