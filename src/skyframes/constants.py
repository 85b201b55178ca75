from __future__ import annotations

# Astronomical unit (m).
DAU = 149597870.7e3
# Light year (m).
LIGHT_YEAR_IN_METER = 9460730472580800.0
# Days per Julian year.
DJY = 365.25
# MJD zero point as a Julian date.
DJM0 = 2400000.5

# Tolerance on |v|^2 - 1 for at-infinity directions around corrections.
UNIT_TOLERANCE = 1e-10
# Looser tolerance accepted from homogeneous 4-vectors.
UNIT_TOLERANCE_V4 = 1e-5

# Standard atmosphere used for the refraction constants.
SEA_LEVEL_PRESSURE_HPA = 1013.25
DEFAULT_TEMPERATURE_C = 15.0
DEFAULT_HUMIDITY = 0.5
DEFAULT_WAVELENGTH_UM = 0.55
