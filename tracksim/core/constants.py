"""
Physical and model constants.
Kept in one place so the clear-sky model can be swapped for measured data later.
"""

# Solar geometry (Cooper declination, Spencer-style equation of time)
DECLINATION_AMPLITUDE = 23.45   # deg
DECLINATION_DAY_OFFSET = 81     # day of year of the March equinox
DECLINATION_YEAR_DAYS = 365.0
EOT_YEAR_DAYS = 364.0
EOT_SIN_2B = 9.87               # minutes
EOT_COS_B = 7.53
EOT_SIN_B = 1.5
DEG_PER_HOUR = 15.0
SOLAR_NOON = 12.0

# Clear-sky irradiance (Meinel & Meinel with Kasten-Young air mass)
SOLAR_CONSTANT = 1353.0         # W/m2
ATMOSPHERIC_TRANSMITTANCE = 0.7
TRANSMITTANCE_EXPONENT = 0.678
KASTEN_YOUNG_A = 0.50572
KASTEN_YOUNG_B = 96.07995
KASTEN_YOUNG_C = -1.6364

# Shading model
PROFILE_SLOPE_SENTINEL = 1000.0  # near vertical shadow when |sin(az)| ~ 0
ZENITH_EPSILON = 1e-9            # horizontal sun component below this = overhead

# Annual sampling
MONTHS = 12
DAYS_PER_MONTH = 30
DAY_STEP = 5
HOUR_STEP = 1
MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Ground grid
GRID_MARGIN_X = 10.0            # m, east/west padding
GRID_MARGIN_Y = 10.0            # m, north/south padding
GRID_RESOLUTION = 0.1           # m per cell
