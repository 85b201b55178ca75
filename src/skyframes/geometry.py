"""Vector and rotation helpers shared by the transform modules.

Conventions:
- Horizontal vectors are X->North, Y->East, Z->Up; azimuth runs N->E.
- Rotation builders return active rotations (they turn the vector, not the axes).
"""
from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import NumericContractError


def normalize(vec: np.ndarray) -> np.ndarray:
    """Return vec / |vec|; the zero vector is returned unchanged."""
    vec = np.asarray(vec, dtype=float)
    norm = float(np.linalg.norm(vec))
    if norm == 0.0:
        return vec.copy()
    return vec / norm


def unit_to_radec(unit_vec: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Vectorized unit-vector -> (ra_deg, dec_deg)."""
    uvec = np.asarray(unit_vec, dtype=float)
    if uvec.ndim == 1:
        uvec = uvec.reshape((1, 3))
    x = uvec[:, 0]
    y = uvec[:, 1]
    z = uvec[:, 2]
    ra = np.degrees(np.arctan2(y, x)) % 360.0
    dec = np.degrees(np.arctan2(z, np.hypot(x, y)))
    if ra.size == 1:
        return float(ra[0]), float(dec[0])
    return ra, dec


def radec_to_unit(ra_deg: float, dec_deg: float) -> np.ndarray:
    """(Possibly vectorized) RA/Dec to unit vector."""
    ra_rad = np.radians(np.asarray(ra_deg, dtype=float))
    dec_rad = np.radians(np.asarray(dec_deg, dtype=float))
    x = np.cos(dec_rad) * np.cos(ra_rad)
    y = np.cos(dec_rad) * np.sin(ra_rad)
    z = np.sin(dec_rad)
    return np.stack((x, y, z), axis=-1)


def vector_to_altaz(vec: np.ndarray) -> Tuple[float, float, float]:
    """Horizontal vector -> (az_deg in [0, 360), alt_deg, distance)."""
    vec = np.asarray(vec, dtype=float)
    x, y, z = (float(c) for c in vec)
    dist = float(np.linalg.norm(vec))
    if dist == 0.0:
        return 0.0, 0.0, 0.0
    az = np.degrees(np.arctan2(y, x)) % 360.0 if (x != 0.0 or y != 0.0) else 0.0
    alt = np.degrees(np.arctan2(z, np.hypot(x, y)))
    return float(az), float(alt), dist


def altaz_to_vector(az_deg: float, alt_deg: float, dist: float = 1.0) -> np.ndarray:
    az = np.radians(az_deg)
    alt = np.radians(alt_deg)
    return dist * np.array(
        [np.cos(alt) * np.cos(az), np.cos(alt) * np.sin(az), np.sin(alt)], dtype=float
    )


def separation_deg(a: np.ndarray, b: np.ndarray) -> float:
    """Angular separation between two (not necessarily unit) vectors."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    cross = float(np.linalg.norm(np.cross(a, b)))
    dot = float(np.dot(a, b))
    if cross == 0.0 and dot == 0.0:
        return 0.0
    return float(np.degrees(np.arctan2(cross, dot)))


def rotation_x(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rotation_y(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_z(angle: float) -> np.ndarray:
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def assert_finite(name: str, vec: np.ndarray) -> None:
    if not np.all(np.isfinite(vec)):
        raise NumericContractError(f"{name} contains non-finite values.")
