"""Observer state and its three-tier update cache.

The primary state is split into logical groups (location, time, view). Each
group yields a plain key tuple. Cache decisions compare the stored keys with
``==``; the hash attributes are derived from them for consumers that only
need a cheap change token:

- ``hash_accurate``: location + time, governs the expensive recompute
  (ephemeris, precession-nutation, Earth rotation, all derived matrices).
- ``hash_partial``: view orientation only (altitude, azimuth, roll).
- ``hash``: both of the above.

``update(fast=True)`` only rebuilds the view matrices when the accurate state
is unchanged; any change of location or time forces a full recompute.
"""
from __future__ import annotations

import math
import warnings
from typing import Optional

import numpy as np
from scipy.spatial.transform import Rotation

from . import kernel
from .config import ObserverConfig, _trace
from .ephemeris import AstropyEphemeris, EphemerisProvider
from .frames import Origin
from .kernel import Astrometry
from .timescales import derived_times, tt_from_utc
from .transforms import position_to_apparent

J2000_MJD = 51544.5

# Changes the horizontal frame (X->N, Y->E, Z->Up) to the GL view axes
# (X right, Y up, looking down -Z).
_R2GL = np.array(
    [
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
        [-1.0, 0.0, 0.0],
    ]
)


def _nan_key(value: float) -> Optional[float]:
    return None if math.isnan(value) else float(value)


class ObserverState:
    """Mutable observer context: one instance per session / view.

    Angles are radians, height is metres, pressure is hPa (NaN derives it from
    the height), times are MJD. Mutate the primary attributes, then call
    `update` before running any transform against this observer.
    """

    def __init__(
        self,
        config: ObserverConfig | None = None,
        ephemeris: EphemerisProvider | None = None,
        *,
        longitude: float = 0.0,
        latitude: float = 0.0,
        height: float = 0.0,
        horizon: float = 0.0,
        pressure: float = math.nan,
        refraction: bool = True,
        altitude: float = 0.0,
        azimuth: float = 0.0,
        roll: float = 0.0,
        tt: float = J2000_MJD,
    ) -> None:
        self.config = config or ObserverConfig()
        self.ephemeris = ephemeris or AstropyEphemeris(self.config.ephemeris)

        # Location group.
        self.longitude = longitude
        self.latitude = latitude
        self.height = height
        self.horizon = horizon
        self.pressure = pressure
        self.refraction = refraction
        # View group.
        self.altitude = altitude
        self.azimuth = azimuth
        self.roll = roll
        # Time group.
        self.tt = tt

        self._ut1 = math.nan
        self._utc = math.nan
        self.last_update = math.nan
        self.last_accurate_update = math.nan

        self._accurate_key: Optional[tuple] = None
        self._partial_key: Optional[tuple] = None
        self.hash: Optional[int] = None
        self.hash_accurate: Optional[int] = None
        self.hash_partial: Optional[int] = None

        zero_pv = np.zeros((2, 3))
        self.earth_pvh = zero_pv.copy()
        self.earth_pvb = zero_pv.copy()
        self.sun_pvb = zero_pv.copy()
        self.sun_pvo = zero_pv.copy()
        self.obs_pvb = zero_pv.copy()
        self.obs_pvg = zero_pv.copy()

        self.astrom: Optional[Astrometry] = None
        self.eo = 0.0

        eye = np.eye(3)
        self.rc2h = eye.copy()  # CIRS to horizontal.
        self.ri2h = eye.copy()  # ICRS to horizontal.
        self.rh2i = eye.copy()  # Horizontal to ICRS.
        self.ri2v = eye.copy()  # ICRS to view.
        self.ri2e = eye.copy()  # ICRS to ecliptic of date.
        self.re2i = eye.copy()  # Ecliptic to ICRS.
        self.re2h = eye.copy()  # Ecliptic to horizontal.
        self.re2v = eye.copy()  # Ecliptic to view.
        self.ro2v = eye.copy()  # Observed to view.
        self.rv2o = eye.copy()  # View to observed.

    @property
    def ut1(self) -> float:
        return self._ut1

    @property
    def utc(self) -> float:
        return self._utc

    def set_utc(self, utc_mjd: float) -> None:
        """Set the time from a UTC MJD; TT stays the primary time."""
        self.tt = tt_from_utc(utc_mjd)

    def _location_key(self) -> tuple:
        return (
            float(self.longitude),
            float(self.latitude),
            float(self.height),
            float(self.horizon),
            _nan_key(self.pressure),
            bool(self.refraction),
        )

    def _time_key(self) -> tuple:
        return (float(self.tt),)

    def _view_key(self) -> tuple:
        return (float(self.altitude), float(self.azimuth), float(self.roll))

    def update(self, fast: bool = False) -> None:
        accurate_key = (self._location_key(), self._time_key())
        partial_key = self._view_key()
        accurate_unchanged = self.astrom is not None and accurate_key == self._accurate_key

        if accurate_unchanged and partial_key == self._partial_key:
            _trace("observer update skipped (state unchanged)")
            return

        if fast and accurate_unchanged:
            _trace("observer fast update (view only)")
            self._update_view_matrices()
        else:
            _trace(f"observer full update tt={self.tt!r}")
            self._update_accurate()
            self._update_view_matrices()
            self._accurate_key = accurate_key
            self.hash_accurate = hash(accurate_key)
            self.last_accurate_update = self.tt

        self._partial_key = partial_key
        self.hash_partial = hash(partial_key)
        self.hash = hash((accurate_key, partial_key))
        self.last_update = self.tt

    def _refraction_constants(self) -> tuple[float, float]:
        if not self.refraction:
            return 0.0, 0.0
        if not -500.0 <= self.height <= 10000.0:
            warnings.warn(
                f"Refraction constants for height {self.height:.0f} m are unreliable.",
                RuntimeWarning,
            )
        pressure = self.pressure
        if math.isnan(pressure):
            pressure = kernel.pressure_from_height(self.height, self.config.temperature_c)
        return kernel.refraction_coefficients(
            pressure,
            self.config.temperature_c,
            self.config.humidity,
            self.config.wavelength_um,
        )

    def _update_accurate(self) -> None:
        self._ut1, self._utc = derived_times(self.tt)

        self.earth_pvh, self.earth_pvb = self.ephemeris.earth_pv(self.tt)
        self.sun_pvb = self.ephemeris.sun_pvb(self.tt)
        self.obs_pvg = self.ephemeris.observer_pvg(
            self.tt, self.longitude, self.latitude, self.height
        )
        self.obs_pvb = self.earth_pvb + self.obs_pvg

        refa, refb = self._refraction_constants()
        self.astrom = kernel.compute_astrometry(
            self.tt,
            self._ut1,
            self.earth_pvb,
            self.earth_pvh,
            self.longitude,
            self.latitude,
            self.height,
            refa,
            refb,
        )
        self.eo = self.astrom.eo

        self.rc2h = kernel.cirs_to_horizontal_matrix(self.astrom)
        self.ri2h = self.rc2h @ self.astrom.bpn
        self.rh2i = self.ri2h.T
        self.ri2e = kernel.ecliptic_matrix(self.tt)
        self.re2i = self.ri2e.T
        self.re2h = self.ri2h @ self.re2i

        self.sun_pvo = position_to_apparent(
            self, Origin.BARYCENTRIC, False, self.sun_pvb
        )

    def _update_view_matrices(self) -> None:
        # Bring the pointing direction onto +X, roll about it, then to GL axes.
        euler = Rotation.from_euler("zyx", [-self.azimuth, self.altitude, self.roll])
        self.ro2v = _R2GL @ euler.as_matrix()
        self.rv2o = self.ro2v.T
        self.ri2v = self.ro2v @ self.ri2h
        self.re2v = self.ri2v @ self.re2i
