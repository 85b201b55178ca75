from .config import ObserverConfig
from .ephemeris import AstropyEphemeris, EphemerisProvider, HorizonsEphemeris
from .errors import (
    BackwardConversionError,
    FrameConversionError,
    InvalidFrameError,
    InvalidOriginError,
    NumericContractError,
)
from .frames import Origin, ReferenceFrame
from .observer import ObserverState
from .pipeline import convert_frame, convert_framev4
from .transforms import astrometric_to_apparent, position_to_apparent, position_to_astrometric


def observer_update(observer: ObserverState, fast: bool = False) -> None:
    observer.update(fast)


__all__ = [
    "AstropyEphemeris",
    "BackwardConversionError",
    "EphemerisProvider",
    "FrameConversionError",
    "HorizonsEphemeris",
    "InvalidFrameError",
    "InvalidOriginError",
    "NumericContractError",
    "ObserverConfig",
    "ObserverState",
    "Origin",
    "ReferenceFrame",
    "astrometric_to_apparent",
    "convert_frame",
    "convert_framev4",
    "observer_update",
    "position_to_apparent",
    "position_to_astrometric",
]
