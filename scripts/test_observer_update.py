import math

import numpy as np

from skyframes import AstropyEphemeris, ObserverConfig, ObserverState, observer_update


def _snapshot(obs):
    return {
        "sun_pvb": obs.sun_pvb.copy(),
        "earth_pvb": obs.earth_pvb.copy(),
        "obs_pvb": obs.obs_pvb.copy(),
        "bpn": obs.astrom.bpn.copy(),
        "ri2h": obs.ri2h.copy(),
        "ro2v": obs.ro2v.copy(),
    }


def test_fast_update_only_touches_view_matrices(atlanta, table_ephemeris):
    before = _snapshot(atlanta)
    calls = table_ephemeris.calls
    astrom = atlanta.astrom

    atlanta.azimuth = math.radians(120.0)
    atlanta.altitude = math.radians(30.0)
    atlanta.roll = math.radians(5.0)
    atlanta.update(fast=True)

    assert table_ephemeris.calls == calls
    assert atlanta.astrom is astrom
    for key in ("sun_pvb", "earth_pvb", "obs_pvb", "bpn", "ri2h"):
        current = atlanta.astrom.bpn if key == "bpn" else getattr(atlanta, key)
        np.testing.assert_array_equal(current, before[key])
    assert not np.array_equal(atlanta.ro2v, before["ro2v"])


def test_unchanged_state_is_a_noop(atlanta, table_ephemeris):
    calls = table_ephemeris.calls
    ro2v = atlanta.ro2v
    hashes = (atlanta.hash, atlanta.hash_accurate, atlanta.hash_partial)
    atlanta.update()
    atlanta.update(fast=True)
    assert table_ephemeris.calls == calls
    assert atlanta.ro2v is ro2v
    assert (atlanta.hash, atlanta.hash_accurate, atlanta.hash_partial) == hashes


def test_fast_request_falls_back_when_time_changes(atlanta, table_ephemeris):
    calls = table_ephemeris.calls
    bpn = atlanta.astrom.bpn.copy()
    atlanta.tt += 1.0
    atlanta.update(fast=True)
    assert table_ephemeris.calls > calls
    assert not np.array_equal(atlanta.astrom.bpn, bpn)
    assert atlanta.last_accurate_update == atlanta.tt


def test_fast_request_falls_back_when_location_changes(atlanta, table_ephemeris):
    calls = table_ephemeris.calls
    old_hash = atlanta.hash_accurate
    atlanta.latitude = math.radians(40.0)
    atlanta.update(fast=True)
    assert table_ephemeris.calls > calls
    assert atlanta.hash_accurate != old_hash


def test_nan_pressure_hashes_stably(table_ephemeris):
    obs = ObserverState(ephemeris=table_ephemeris, pressure=math.nan, tt=58450.0)
    obs.update()
    calls = table_ephemeris.calls
    obs.pressure = float("nan")
    observer_update(obs)
    assert table_ephemeris.calls == calls


def test_refraction_constants_follow_flag(table_ephemeris):
    obs = ObserverState(ephemeris=table_ephemeris, refraction=False, tt=58450.0)
    obs.update()
    assert obs.astrom.refa == 0.0 and obs.astrom.refb == 0.0
    obs.refraction = True
    obs.update()
    assert obs.astrom.refa > 0.0
    assert obs.astrom.refb < 0.0


def test_derived_times_follow_tt(atlanta):
    assert abs(atlanta.utc - 58450.0) * 86400.0 < 1e-3
    assert abs(atlanta.tt - atlanta.utc - 69.184 / 86400.0) < 1e-9


def test_view_matrix_points_view_direction_down_minus_z(atlanta):
    atlanta.azimuth = math.radians(75.0)
    atlanta.altitude = math.radians(20.0)
    atlanta.update(fast=True)
    az, alt = atlanta.azimuth, atlanta.altitude
    direction = np.array(
        [math.cos(alt) * math.cos(az), math.cos(alt) * math.sin(az), math.sin(alt)]
    )
    np.testing.assert_allclose(atlanta.ro2v @ direction, [0.0, 0.0, -1.0], atol=1e-12)
    np.testing.assert_allclose(atlanta.rv2o @ atlanta.ro2v, np.eye(3), atol=1e-12)
    np.testing.assert_allclose(atlanta.ri2v, atlanta.ro2v @ atlanta.ri2h, atol=1e-15)


def test_sun_as_seen_from_observer_is_about_one_au(atlanta):
    dist = float(np.linalg.norm(atlanta.sun_pvo[0]))
    assert 0.98 < dist < 0.99


def test_height_change_between_colliding_floats_recomputes(table_ephemeris):
    # hash(-1.0) == hash(-2.0) in CPython; state must be compared by value.
    obs = ObserverState(ephemeris=table_ephemeris, height=-1.0, tt=58450.0)
    obs.update()
    calls = table_ephemeris.calls
    obs.height = -2.0
    obs.update()
    assert table_ephemeris.calls > calls


def test_longitude_change_between_colliding_floats_moves_horizon(table_ephemeris):
    obs = ObserverState(ephemeris=table_ephemeris, longitude=-1.0, tt=58450.0)
    obs.update()
    ri2h = obs.ri2h.copy()
    obs.longitude = -2.0
    obs.update()
    assert not np.array_equal(obs.ri2h, ri2h)


def test_azimuth_change_between_colliding_floats_fast_update(atlanta):
    atlanta.azimuth = -1.0
    atlanta.update(fast=True)
    ro2v = atlanta.ro2v.copy()
    atlanta.azimuth = -2.0
    atlanta.update(fast=True)
    assert not np.array_equal(atlanta.ro2v, ro2v)


def test_full_update_builds_astrometry_from_supplied_earth(atlanta):
    astrom = atlanta.astrom
    # Observer barycentric position = Earth + site offset (a few thousand km).
    offset = astrom.eb - atlanta.earth_pvb[0]
    assert 1e-5 < np.linalg.norm(offset) < 1e-4
    assert 0.98 < astrom.em < 0.99
    assert abs(np.linalg.norm(astrom.eh) - 1.0) < 1e-12
    assert 0.0 < 1.0 - astrom.bm1 < 1e-8
    np.testing.assert_allclose(atlanta.ri2h @ atlanta.rh2i, np.eye(3), atol=1e-12)


def test_configured_ephemeris_reaches_default_provider():
    assert AstropyEphemeris().ephemeris == ObserverConfig().ephemeris
    obs = ObserverState(ObserverConfig(ephemeris="de421"))
    assert obs.ephemeris.ephemeris == "de421"
