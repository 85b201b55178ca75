"""Frame conversion pipeline.

Frames are ordered ASTROMETRIC < ICRF < CIRS < JNOW < OBSERVED < VIEW and a
conversion walks forward through the stages below. A stage "entering" frame
F runs when origin < F <= dest. JNOW is terminal: its stage only runs when
JNOW is the destination and the conversion stops there, so JNOW is never a
waypoint toward OBSERVED or VIEW.

Backward conversions are refused. Refraction and light deflection cannot be
inverted from the stored observer state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

import numpy as np

from . import kernel
from .constants import UNIT_TOLERANCE_V4
from .errors import BackwardConversionError, InvalidFrameError, NumericContractError
from .frames import ReferenceFrame, as_frame
from .geometry import assert_finite, normalize, rotation_z
from .transforms import astrometric_to_apparent, require_updated

if TYPE_CHECKING:
    from .observer import ObserverState


def _astrometric_to_icrf(obs: ObserverState, p: np.ndarray, at_infinity: bool) -> np.ndarray:
    return astrometric_to_apparent(obs, p, at_infinity)


def _icrf_to_cirs(obs: ObserverState, p: np.ndarray, at_infinity: bool) -> np.ndarray:
    return obs.astrom.bpn @ p


def _cirs_to_jnow(obs: ObserverState, p: np.ndarray, at_infinity: bool) -> np.ndarray:
    # Apparent RA = CIRS RA - equation of the origins.
    return rotation_z(-obs.eo) @ p


def _cirs_to_observed(obs: ObserverState, p: np.ndarray, at_infinity: bool) -> np.ndarray:
    astrom = obs.astrom
    p = obs.rc2h @ p
    if at_infinity:
        return normalize(kernel.refraction(p, astrom.refa, astrom.refb))
    dist = float(np.linalg.norm(p))
    if dist == 0.0:
        return np.zeros(3)
    return normalize(kernel.refraction(p / dist, astrom.refa, astrom.refb)) * dist


def _observed_to_view(obs: ObserverState, p: np.ndarray, at_infinity: bool) -> np.ndarray:
    return obs.ro2v @ p


@dataclass(frozen=True)
class Stage:
    name: str
    enters: ReferenceFrame
    apply: Callable[["ObserverState", np.ndarray, bool], np.ndarray]
    terminal: bool = False

    def runs(self, origin: ReferenceFrame, dest: ReferenceFrame) -> bool:
        if self.terminal:
            return origin < self.enters == dest
        return origin < self.enters <= dest


STAGES: tuple[Stage, ...] = (
    Stage("astrometric_to_apparent", ReferenceFrame.ICRF, _astrometric_to_icrf),
    Stage("icrf_to_cirs", ReferenceFrame.CIRS, _icrf_to_cirs),
    Stage("cirs_to_jnow", ReferenceFrame.JNOW, _cirs_to_jnow, terminal=True),
    Stage("cirs_to_observed", ReferenceFrame.OBSERVED, _cirs_to_observed),
    Stage("observed_to_view", ReferenceFrame.VIEW, _observed_to_view),
)


def _check_endpoint(frame) -> ReferenceFrame:
    frame = as_frame(frame)
    if frame >= ReferenceFrame.NDC:
        raise InvalidFrameError(f"Cannot convert to or from projected frame {frame.name}")
    return frame


def stages_between(origin, dest) -> list[Stage]:
    """Stages a forward conversion from `origin` to `dest` runs, in order."""
    origin = _check_endpoint(origin)
    dest = _check_endpoint(dest)
    if dest < origin:
        raise BackwardConversionError(
            f"Backward conversion {origin.name} -> {dest.name} is not supported"
        )
    selected = []
    for stage in STAGES:
        if stage.runs(origin, dest):
            selected.append(stage)
            if stage.terminal:
                break
    return selected


def convert_frame(
    observer: ObserverState, origin, dest, at_infinity: bool, vec
) -> np.ndarray:
    """Convert a direction (or AU-scaled position) from `origin` to `dest`."""
    stages = stages_between(origin, dest)
    out = np.array(vec, dtype=float)
    if out.shape != (3,):
        raise ValueError(f"convert_frame expects a 3-vector; got shape {out.shape}")
    assert_finite("input vector", out)
    if not stages:
        return out

    require_updated(observer)
    for stage in stages:
        out = stage.apply(observer, out, at_infinity)
    assert_finite(f"{as_frame(dest).name} vector", out)
    return out


def convert_framev4(observer: ObserverState, origin, dest, vec4) -> np.ndarray:
    """Convert a homogeneous 4-vector; w == 1 marks a unit direction at infinity."""
    vec4 = np.asarray(vec4, dtype=float)
    if vec4.shape != (4,):
        raise ValueError(f"convert_framev4 expects a 4-vector; got shape {vec4.shape}")
    xyz = vec4[:3]
    if vec4[3] == 1.0:
        norm2 = float(np.dot(xyz, xyz))
        if not abs(norm2 - 1.0) <= UNIT_TOLERANCE_V4:
            raise NumericContractError(
                f"At-infinity 4-vector must be unit length; |v|^2 = {norm2!r}"
            )
        return convert_frame(observer, origin, dest, True, xyz)
    return convert_frame(observer, origin, dest, False, xyz)
