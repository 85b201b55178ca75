from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import DEFAULT_HUMIDITY, DEFAULT_TEMPERATURE_C, DEFAULT_WAVELENGTH_UM

DEFAULT_EPHEMERIS = os.environ.get("SKYFRAMES_EPHEMERIS", "de432s")
_TRACE = os.environ.get("SKYFRAMES_TRACE", "0").lower() in {"1", "true", "yes"}


def _trace(message: str) -> None:
    if _TRACE:
        print(f"[skyframes-trace] {message}", flush=True)


@dataclass(frozen=True)
class ObserverConfig:
    """Settings that are fixed for the lifetime of an observer state."""

    ephemeris: str = DEFAULT_EPHEMERIS
    temperature_c: float = DEFAULT_TEMPERATURE_C
    humidity: float = DEFAULT_HUMIDITY
    wavelength_um: float = DEFAULT_WAVELENGTH_UM
