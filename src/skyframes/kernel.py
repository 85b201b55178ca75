"""Astrometry kernel: thin adapters over ERFA (pyerfa).

Everything here is a pure function of its arguments. The observer state calls
these once per accurate update and stores the results; the per-object
transforms only call `aberration`, `solar_deflection` and `refraction`.

Units: angles in radians, distances in AU unless a name says otherwise,
dates as MJD (the ERFA two-part dates are formed with DJM0).
"""
from __future__ import annotations

from dataclasses import dataclass

import erfa
import numpy as np

from .constants import (
    DEFAULT_HUMIDITY,
    DEFAULT_TEMPERATURE_C,
    DEFAULT_WAVELENGTH_UM,
    DJM0,
    SEA_LEVEL_PRESSURE_HPA,
)
from .geometry import rotation_z

# Refraction model guards, as used by ERFA's observed-place routines.
_CELMIN = 1e-6
_SELMIN = 0.05


@dataclass
class Astrometry:
    """Star-independent astrometry parameters for one observer and epoch."""

    bpn: np.ndarray  # bias-precession-nutation matrix (ICRS -> CIRS)
    eb: np.ndarray  # observer barycentric position (AU)
    eh: np.ndarray  # Sun -> observer unit vector
    em: float  # Sun -> observer distance (AU)
    v: np.ndarray  # observer barycentric velocity / c
    bm1: float  # sqrt(1 - |v|^2), reciprocal Lorentz factor
    eral: float  # local Earth rotation angle
    along: float  # longitude + s'
    phi: float  # geodetic latitude
    sphi: float
    cphi: float
    diurab: float  # diurnal aberration magnitude
    refa: float
    refb: float
    eo: float  # equation of the origins (ERA - GST)


def pressure_from_height(height_m: float, temperature_c: float = DEFAULT_TEMPERATURE_C) -> float:
    """Approximate site pressure (hPa) from height above the ellipsoid."""
    return SEA_LEVEL_PRESSURE_HPA * float(np.exp(-height_m / (29.3 * (273.15 + temperature_c))))


def refraction_coefficients(
    pressure_hpa: float,
    temperature_c: float = DEFAULT_TEMPERATURE_C,
    humidity: float = DEFAULT_HUMIDITY,
    wavelength_um: float = DEFAULT_WAVELENGTH_UM,
) -> tuple[float, float]:
    """Return the (A, B) constants of the A*tan(z) + B*tan^3(z) model."""
    refa, refb = erfa.refco(pressure_hpa, temperature_c, humidity, wavelength_um)
    return float(refa), float(refb)


def compute_astrometry(
    tt: float,
    ut1: float,
    earth_pvb: np.ndarray,
    earth_pvh: np.ndarray,
    longitude: float,
    latitude: float,
    height: float,
    refa: float = 0.0,
    refb: float = 0.0,
) -> Astrometry:
    """Build the astrometry context from TT/UT1 and the supplied Earth ephemeris.

    Polar motion is taken as zero.
    """
    earth_pvb = np.asarray(earth_pvb, dtype=float)
    earth_pvh = np.asarray(earth_pvh, dtype=float)
    rbpn = erfa.pnm06a(DJM0, tt)
    x, y = erfa.bpn2xy(rbpn)
    s = erfa.s06(DJM0, tt, x, y)
    theta = erfa.era00(DJM0, ut1)
    sp = erfa.sp00(DJM0, tt)
    ebpv = np.zeros((), dtype=erfa.dt_pv)
    ebpv["p"] = earth_pvb[0]
    ebpv["v"] = earth_pvb[1]
    astrom = erfa.apco(
        DJM0, tt, ebpv, earth_pvh[0], x, y, s, theta,
        longitude, latitude, height, 0.0, 0.0, sp, refa, refb,
    )
    eo = erfa.eors(rbpn, s)
    return Astrometry(
        bpn=np.array(astrom["bpn"], dtype=float),
        eb=np.array(astrom["eb"], dtype=float),
        eh=np.array(astrom["eh"], dtype=float),
        em=float(astrom["em"]),
        v=np.array(astrom["v"], dtype=float),
        bm1=float(astrom["bm1"]),
        eral=float(astrom["eral"]),
        along=float(astrom["along"]),
        phi=float(astrom["phi"]),
        sphi=float(astrom["sphi"]),
        cphi=float(astrom["cphi"]),
        diurab=float(astrom["diurab"]),
        refa=float(astrom["refa"]),
        refb=float(astrom["refb"]),
        eo=float(eo),
    )


def cirs_to_horizontal_matrix(astrom: Astrometry) -> np.ndarray:
    """Earth rotation + site rotation, CIRS -> horizontal.

    Polar motion is zero (see `compute_astrometry`) and diurnal aberration is
    not part of the matrix.
    """
    # CIRS -> (-HA, Dec) cartesian.
    era = rotation_z(-astrom.eral)
    # (-HA, Dec) -> (South, East, Up).
    site = np.array(
        [
            [astrom.sphi, 0.0, -astrom.cphi],
            [0.0, 1.0, 0.0],
            [astrom.cphi, 0.0, astrom.sphi],
        ]
    )
    south_to_north = np.diag([-1.0, 1.0, 1.0])
    return south_to_north @ site @ era


def ecliptic_matrix(tt: float) -> np.ndarray:
    """ICRS -> ecliptic of date (IAU 2006)."""
    return np.array(erfa.ecm06(DJM0, tt), dtype=float)


def aberration(
    direction: np.ndarray, velocity: np.ndarray, sun_distance: float, lorentz_term: float
) -> np.ndarray:
    """Stellar aberration of a natural unit direction, giving the proper direction."""
    return np.array(
        erfa.ab(np.asarray(direction, dtype=float), velocity, sun_distance, lorentz_term),
        dtype=float,
    )


def solar_deflection(
    direction: np.ndarray, sun_direction: np.ndarray, sun_distance: float
) -> np.ndarray:
    """Light deflection by the Sun for a source at infinity."""
    return np.array(
        erfa.ldsun(np.asarray(direction, dtype=float), sun_direction, sun_distance),
        dtype=float,
    )


def refraction(direction: np.ndarray, refa: float, refb: float) -> np.ndarray:
    """Refract a unit horizontal direction (Z up); the result is near unit length."""
    x, y, z = (float(c) for c in direction)
    r = max(float(np.hypot(x, y)), _CELMIN)
    zc = max(z, _SELMIN)
    tz = r / zc
    w = refb * tz * tz
    delta = (refa + w) * tz / (1.0 + (refa + 3.0 * w) / (zc * zc))
    cosdel = 1.0 - delta * delta / 2.0
    f = cosdel - delta * zc / r
    return np.array([x * f, y * f, cosdel * z + delta * r], dtype=float)
