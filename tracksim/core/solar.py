import numpy as np
from dataclasses import dataclass

from tracksim.core import constants as C


@dataclass(frozen=True)
class SunPosition:
    elevation: float # Degrees, Horizon=0, negative below
    azimuth: float # Degrees, North=0, East=90


def declination(day_of_year: float) -> float:
    """Solar declination in degrees."""
    angle = 2 * np.pi / C.DECLINATION_YEAR_DAYS * (day_of_year - C.DECLINATION_DAY_OFFSET)
    return float(C.DECLINATION_AMPLITUDE * np.sin(angle))


def equation_of_time(day_of_year: float) -> float:
    """Equation of time in minutes."""
    b = 2 * np.pi / C.EOT_YEAR_DAYS * (day_of_year - C.DECLINATION_DAY_OFFSET)
    return float(C.EOT_SIN_2B * np.sin(2 * b) - C.EOT_COS_B * np.cos(b) - C.EOT_SIN_B * np.sin(b))


def solar_noon(day_of_year: float) -> float:
    """Clock hour at which the hour angle is zero."""
    return C.SOLAR_NOON - equation_of_time(day_of_year) / 60.0


def hour_angle(day_of_year: float, hour: float) -> float:
    solar_time = hour + equation_of_time(day_of_year) / 60.0
    return (solar_time - C.SOLAR_NOON) * C.DEG_PER_HOUR


def solar_position(day_of_year: float, hour: float, latitude: float) -> SunPosition:
    """
    Sun position for a clock hour on a day of the year.
    Longitude plays no part: the hour is treated as local mean time.
    Always returns a value; a negative elevation means night.
    """
    ha = hour_angle(day_of_year, hour)

    lat = np.radians(latitude)
    dec = np.radians(declination(day_of_year))
    ha_rad = np.radians(ha)

    sin_el = np.sin(lat) * np.sin(dec) + np.cos(lat) * np.cos(dec) * np.cos(ha_rad)
    el_rad = np.arcsin(np.clip(sin_el, -1.0, 1.0))

    # Azimuth from north; acos only gives [0, 180] so afternoons are mirrored west
    # At the poles or an overhead sun the denominator vanishes; the clip keeps acos defined
    with np.errstate(divide='ignore', invalid='ignore'):
        cos_az = (np.sin(dec) - np.sin(lat) * np.sin(el_rad)) / (np.cos(lat) * np.cos(el_rad))
    if not np.isfinite(cos_az):
        cos_az = 1.0
    az_raw = np.degrees(np.arccos(np.clip(cos_az, -1.0, 1.0)))
    azimuth = 360.0 - az_raw if ha > 0 else az_raw

    return SunPosition(elevation=float(np.degrees(el_rad)), azimuth=float(azimuth))
