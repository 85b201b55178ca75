import math

import numpy as np
import pytest
from astropy.utils import iers

from skyframes import ObserverState

iers.conf.auto_download = False

# Atlanta, 2018-11-28 00:00 UTC; vectors from Skyfield / DE421 (AU, AU/day).
ATLANTA_UTC = 58450.0
ATLANTA_LON = math.radians(-84.3880)
ATLANTA_LAT = math.radians(33.7490)
SUN_PVB = np.array(
    [
        [-0.000491427976, 0.006775501407, 0.002867701470],
        [-0.000007705635, 0.000001971237, 0.000001065545],
    ]
)
EARTH_PVB = np.array(
    [
        [0.409719639938, 0.830054038320, 0.359756325081],
        [-0.015929553568, 0.006509664008, 0.002821477715],
    ]
)
ATLANTA_PVB = np.array(
    [
        [0.409753473872, 0.830043199650, 0.359779815735],
        [-0.015861269939, 0.006722563288, 0.002821360265],
    ]
)


class TableEphemeris:
    """Fixed vectors for the Atlanta epoch; counts provider calls."""

    def __init__(self):
        self.calls = 0

    def earth_pv(self, tt):
        self.calls += 1
        return EARTH_PVB - SUN_PVB, EARTH_PVB.copy()

    def sun_pvb(self, tt):
        self.calls += 1
        return SUN_PVB.copy()

    def observer_pvg(self, tt, longitude, latitude, height):
        self.calls += 1
        return ATLANTA_PVB - EARTH_PVB

    def body_pvb(self, name, tt):
        if name == "sun":
            return SUN_PVB.copy()
        if name == "earth":
            return EARTH_PVB.copy()
        raise KeyError(name)


@pytest.fixture
def table_ephemeris():
    return TableEphemeris()


@pytest.fixture
def atlanta(table_ephemeris):
    obs = ObserverState(
        ephemeris=table_ephemeris,
        longitude=ATLANTA_LON,
        latitude=ATLANTA_LAT,
        refraction=False,
    )
    obs.set_utc(ATLANTA_UTC)
    obs.update()
    return obs
