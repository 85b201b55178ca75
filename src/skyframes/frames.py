from __future__ import annotations

from enum import IntEnum

from .errors import InvalidFrameError, InvalidOriginError


class ReferenceFrame(IntEnum):
    ASTROMETRIC = -1
    ICRF = 0
    CIRS = 1
    JNOW = 2
    OBSERVED = 3
    VIEW = 4
    # Already projected; never a conversion endpoint.
    NDC = 5
    WINDOW = 6


class Origin(IntEnum):
    BARYCENTRIC = 0
    HELIOCENTRIC = 1
    GEOCENTRIC = 2
    OBSERVERCENTRIC = 3


def as_frame(value: ReferenceFrame | int | str) -> ReferenceFrame:
    """Coerce an int or name ("icrf", "OBSERVED", ...) to a ReferenceFrame."""
    if isinstance(value, ReferenceFrame):
        return value
    if isinstance(value, str):
        try:
            return ReferenceFrame[value.strip().upper()]
        except KeyError:
            raise InvalidFrameError(f"Unknown reference frame: {value!r}") from None
    try:
        return ReferenceFrame(int(value))
    except (TypeError, ValueError):
        raise InvalidFrameError(f"Unknown reference frame: {value!r}") from None


def as_origin(value: Origin | int | str) -> Origin:
    if isinstance(value, Origin):
        return value
    if isinstance(value, str):
        try:
            return Origin[value.strip().upper()]
        except KeyError:
            raise InvalidOriginError(f"Unknown origin: {value!r}") from None
    try:
        return Origin(int(value))
    except (TypeError, ValueError):
        raise InvalidOriginError(f"Unknown origin: {value!r}") from None
