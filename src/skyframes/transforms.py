"""Origin translation and relativistic corrections.

Positions arrive as pv arrays of shape (2, 3) in AU and AU/day along ICRF
axes. Sources "at infinity" carry a unit direction in row 0 and no distance.

Light-time is corrected with a single classical step, p -= v * dt, which for
solar-system bodies also stands in for annual and diurnal aberration. The
relativistic velocity-addition formula is deliberately not used.

`position_to_astrometric` must run before `astrometric_to_apparent`: the
first leaves the result unaberrated, the second adds the observer's
aberration.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from . import kernel
from .constants import DAU, DJY, LIGHT_YEAR_IN_METER, UNIT_TOLERANCE
from .ephemeris import as_pv
from .errors import InvalidOriginError, NumericContractError
from .frames import Origin, as_origin

if TYPE_CHECKING:
    from .observer import ObserverState


def _check_unit(name: str, vec: np.ndarray) -> None:
    norm2 = float(np.dot(vec, vec))
    if not abs(norm2 - 1.0) <= UNIT_TOLERANCE:
        raise NumericContractError(
            f"{name} must be a unit vector at infinity; |v|^2 = {norm2!r}"
        )


def require_updated(observer: ObserverState) -> None:
    if observer.astrom is None:
        raise RuntimeError("Observer state has not been updated; call update() first.")


def correct_speed_of_light(pv: np.ndarray) -> np.ndarray:
    """Move the position back along its velocity by the light travel time."""
    ldt = float(np.linalg.norm(pv[0])) * DAU / LIGHT_YEAR_IN_METER * DJY
    out = np.array(pv, dtype=float)
    out[0] = out[0] - ldt * out[1]
    return out


def position_to_apparent(
    observer: ObserverState, origin: Origin | int, at_infinity: bool, pv
) -> np.ndarray:
    """Observer-centric apparent pv of an object given relative to `origin`."""
    require_updated(observer)
    origin = as_origin(origin)
    out = as_pv(pv)

    if not at_infinity:
        if origin == Origin.BARYCENTRIC:
            out = out - observer.obs_pvb
        elif origin == Origin.HELIOCENTRIC:
            out = out + observer.sun_pvb - observer.obs_pvb
        elif origin == Origin.GEOCENTRIC:
            out = out - observer.obs_pvg
        else:
            raise InvalidOriginError(
                f"position_to_apparent does not accept origin {origin.name}"
            )
        return correct_speed_of_light(out)

    # A unit direction at infinity is the same from every origin.
    astrom = observer.astrom
    _check_unit("input direction", out[0])
    # Deflection formula is only valid for distant sources.
    out[0] = kernel.solar_deflection(out[0], astrom.eh, astrom.em)
    out[0] = kernel.aberration(out[0], astrom.v, astrom.em, astrom.bm1)
    _check_unit("apparent direction", out[0])
    return out


def position_to_astrometric(observer: ObserverState, origin: Origin | int, pv) -> np.ndarray:
    """Geocentric astrometric pv: light-time corrected, not yet aberrated."""
    require_updated(observer)
    origin = as_origin(origin)
    out = as_pv(pv)

    if origin == Origin.BARYCENTRIC:
        out = out - observer.earth_pvb
    elif origin == Origin.HELIOCENTRIC:
        out = out + observer.sun_pvb - observer.earth_pvb
    elif origin == Origin.GEOCENTRIC:
        pass
    elif origin == Origin.OBSERVERCENTRIC:
        out = out + observer.obs_pvb - observer.earth_pvb

    # Light time uses the object's own barycentric velocity; using the
    # Earth-relative one would also add annual aberration here.
    relative_velocity = out[1].copy()
    out[1] = out[1] + observer.earth_pvb[1]
    out = correct_speed_of_light(out)
    out[1] = relative_velocity
    return out


def astrometric_to_apparent(
    observer: ObserverState, direction, at_infinity: bool
) -> np.ndarray:
    """Apply deflection (at infinity) and the observer's aberration."""
    require_updated(observer)
    astrom = observer.astrom
    out = np.array(direction, dtype=float)

    if at_infinity:
        _check_unit("astrometric direction", out)
        out = kernel.solar_deflection(out, astrom.eh, astrom.em)
        out = kernel.aberration(out, astrom.v, astrom.em, astrom.bm1)
        _check_unit("apparent direction", out)
        return out

    out = out - (observer.obs_pvb[0] - observer.earth_pvb[0])
    dist = float(np.linalg.norm(out))
    if dist == 0.0:
        return out
    out = kernel.aberration(out / dist, astrom.v, astrom.em, astrom.bm1)
    return out * dist
