"""Ephemeris providers.

A provider answers barycentric / heliocentric / geocentric position-velocity
pairs for the observer state. A pv is a float array of shape (2, 3):
row 0 is the position (AU), row 1 the velocity (AU/day), both along ICRF axes.
"""
from __future__ import annotations

from typing import Protocol

import numpy as np
from astropy import units as u
from astropy.coordinates import (
    EarthLocation,
    get_body_barycentric_posvel,
    solar_system_ephemeris,
)
from astropy.time import Time
from astroquery.jplhorizons import Horizons

from .config import DEFAULT_EPHEMERIS


def as_pv(value) -> np.ndarray:
    """Coerce a ((x, y, z), (vx, vy, vz)) pair into a fresh (2, 3) float array."""
    arr = np.array(value, dtype=float)
    if arr.shape != (2, 3):
        raise ValueError(f"position-velocity must have shape (2, 3); got {arr.shape}")
    return arr


def _tt_time(tt: float) -> Time:
    return Time(tt, format="mjd", scale="tt")


class EphemerisProvider(Protocol):
    def earth_pv(self, tt: float) -> tuple[np.ndarray, np.ndarray]:
        """Return (heliocentric pv, barycentric pv) of the Earth."""

    def sun_pvb(self, tt: float) -> np.ndarray:
        ...

    def observer_pvg(
        self, tt: float, longitude: float, latitude: float, height: float
    ) -> np.ndarray:
        """Geocentric pv of a site (radians, radians, metres) along GCRS axes."""

    def body_pvb(self, name: str, tt: float) -> np.ndarray:
        ...


class AstropyEphemeris:
    """Provider backed by astropy's solar-system ephemerides.

    `ephemeris` is any name accepted by `solar_system_ephemeris.set`
    ("de432s", "de421", "builtin", ...). JPL kernels are downloaded and cached by astropy.
    """

    def __init__(self, ephemeris: str | None = None) -> None:
        self.ephemeris = ephemeris or DEFAULT_EPHEMERIS

    def body_pvb(self, name: str, tt: float) -> np.ndarray:
        with solar_system_ephemeris.set(self.ephemeris):
            pos, vel = get_body_barycentric_posvel(name, _tt_time(tt))
        return np.array(
            [pos.xyz.to(u.au).value, vel.xyz.to(u.au / u.day).value], dtype=float
        )

    def sun_pvb(self, tt: float) -> np.ndarray:
        return self.body_pvb("sun", tt)

    def earth_pv(self, tt: float) -> tuple[np.ndarray, np.ndarray]:
        earth_pvb = self.body_pvb("earth", tt)
        earth_pvh = earth_pvb - self.sun_pvb(tt)
        return earth_pvh, earth_pvb

    def observer_pvg(
        self, tt: float, longitude: float, latitude: float, height: float
    ) -> np.ndarray:
        loc = EarthLocation.from_geodetic(
            lon=longitude * u.rad, lat=latitude * u.rad, height=height * u.m
        )
        pos, vel = loc.get_gcrs_posvel(_tt_time(tt))
        return np.array(
            [pos.xyz.to(u.au).value, vel.xyz.to(u.au / u.day).value], dtype=float
        )


def normalize_horizons_id(raw: str) -> str:
    """Map asteroid numbers to Horizons small-body ids; pass names through."""
    s = raw.strip()
    if s.isdigit():
        n = int(s)
        if 1 <= n < 2000000:
            return str(2000000 + n)
    return s


class HorizonsEphemeris(AstropyEphemeris):
    """Barycentric vectors from JPL Horizons (network access required).

    Earth/Sun/body vectors come from Horizons relative to the solar-system
    barycentre in the ICRF equatorial plane; the observer's geocentric offset
    still comes from astropy.
    """

    _NAMES = {
        "sun": "10",
        "mercury": "199",
        "venus": "299",
        "earth": "399",
        "moon": "301",
        "mars": "499",
        "jupiter": "599",
        "saturn": "699",
        "uranus": "799",
        "neptune": "899",
        "pluto": "999",
    }

    def body_pvb(self, name: str, tt: float) -> np.ndarray:
        target = self._NAMES.get(name.lower(), normalize_horizons_id(name))
        epoch = _tt_time(tt).tdb.jd
        obj = Horizons(id=target, location="@0", epochs=epoch)
        row = obj.vectors(refplane="earth")[0]
        return np.array(
            [
                [float(row["x"]), float(row["y"]), float(row["z"])],
                [float(row["vx"]), float(row["vy"]), float(row["vz"])],
            ],
            dtype=float,
        )
