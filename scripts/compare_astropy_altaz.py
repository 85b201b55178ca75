#!/usr/bin/env python3
"""Compare the frame pipeline's observed az/alt with astropy's AltAz frame.

Usage: python scripts/compare_astropy_altaz.py [utc_mjd] [lon_deg] [lat_deg]
"""
import math
import sys

from astropy import units as u
from astropy.coordinates import AltAz, EarthLocation, get_body
from astropy.time import Time

from skyframes import ObserverState
from skyframes.altaz_cli import body_position
from skyframes.geometry import altaz_to_vector, separation_deg

utc = float(sys.argv[1]) if len(sys.argv) > 1 else 58450.0
lon = float(sys.argv[2]) if len(sys.argv) > 2 else -84.388
lat = float(sys.argv[3]) if len(sys.argv) > 3 else 33.749

obs = ObserverState(longitude=math.radians(lon), latitude=math.radians(lat), refraction=False)
obs.set_utc(utc)
obs.update()

t = Time(utc, format="mjd", scale="utc")
loc = EarthLocation.from_geodetic(lon * u.deg, lat * u.deg, 0.0 * u.m)
frame = AltAz(obstime=t, location=loc, pressure=0.0 * u.bar)

for body in ("sun", "moon", "venus", "mars", "jupiter"):
    ours = body_position(obs, body)
    ref = get_body(body, t, loc).transform_to(frame)
    sep = separation_deg(
        altaz_to_vector(ours["az_deg"], ours["alt_deg"]),
        altaz_to_vector(ref.az.deg, ref.alt.deg),
    )
    print(
        f"{body:8s} az {ours['az_deg']:9.4f} / {ref.az.deg:9.4f}  "
        f"alt {ours['alt_deg']:8.4f} / {ref.alt.deg:8.4f}  sep {sep * 3600.0:7.2f} arcsec"
    )
