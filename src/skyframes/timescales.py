from __future__ import annotations

from astropy.time import Time


def tt_from_utc(utc_mjd: float) -> float:
    return float(Time(utc_mjd, format="mjd", scale="utc").tt.mjd)


def derived_times(tt_mjd: float) -> tuple[float, float]:
    """Return (ut1, utc) MJD consistent with a TT MJD.

    UT1 uses astropy's IERS tables; outside their range astropy warns and
    extrapolates.
    """
    t = Time(tt_mjd, format="mjd", scale="tt")
    return float(t.ut1.mjd), float(t.utc.mjd)
