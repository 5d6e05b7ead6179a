import logging
import numpy as np
import pandas as pd
import pvlib
from typing import Dict, Iterable, Optional

from tracksim.core.solar import solar_position

logger = logging.getLogger(__name__)

REFERENCE_YEAR = 2025


def _reference_times(days: Iterable[int], hours: Iterable[float]) -> pd.DataFrame:
    rows = []
    base = pd.Timestamp(f"{REFERENCE_YEAR}-01-01", tz="UTC")
    for doy in days:
        for h in hours:
            rows.append({
                "day": int(doy),
                "hour": float(h),
                # Longitude 0 in UTC: clock hour is local mean time, as in the model
                "time": base + pd.Timedelta(days=int(doy) - 1, hours=float(h))
            })
    return pd.DataFrame(rows)


def compare_with_pvlib(latitude: float,
                       days: Optional[Iterable[int]] = None,
                       hours: Optional[Iterable[float]] = None) -> pd.DataFrame:
    """
    Evaluates the simplified solar model against pvlib's NREL SPA for the
    same moments. Azimuth differences are wrapped to [-180, 180).

    Columns: day, hour, model_el, ref_el, model_az, ref_az, d_el, d_az
    """
    if days is None:
        days = range(1, 366, 15)
    if hours is None:
        hours = range(0, 24)

    df = _reference_times(days, hours)
    if df.empty:
        return pd.DataFrame(columns=["day", "hour", "model_el", "ref_el",
                                     "model_az", "ref_az", "d_el", "d_az"])

    times = pd.DatetimeIndex(df["time"])
    ref = pvlib.solarposition.get_solarposition(times, latitude, 0.0)

    model = [solar_position(d, h, latitude) for d, h in zip(df["day"], df["hour"])]
    df["model_el"] = [p.elevation for p in model]
    df["model_az"] = [p.azimuth for p in model]
    df["ref_el"] = ref["elevation"].values
    df["ref_az"] = ref["azimuth"].values

    df["d_el"] = df["model_el"] - df["ref_el"]
    df["d_az"] = (df["model_az"] - df["ref_az"] + 180.0) % 360.0 - 180.0

    return df.drop(columns=["time"])


def summarize(frame: pd.DataFrame, min_elevation: float = 5.0) -> Dict[str, float]:
    """
    Error statistics over rows where both models put the sun above min_elevation.
    `same_side_fraction` is the share of rows where both azimuths fall on the
    same side (east or west) of the meridian.
    """
    day = frame[(frame["model_el"] > min_elevation) & (frame["ref_el"] > min_elevation)]
    if day.empty:
        logger.warning("No daylight rows above %.1f deg to compare", min_elevation)
        return {"samples": 0, "max_abs_d_el": 0.0, "mean_abs_d_el": 0.0,
                "max_abs_d_az": 0.0, "mean_abs_d_az": 0.0, "same_side_fraction": 0.0}

    model_east = day["model_az"] < 180.0
    ref_east = day["ref_az"] < 180.0

    return {
        "samples": int(len(day)),
        "max_abs_d_el": float(np.abs(day["d_el"]).max()),
        "mean_abs_d_el": float(np.abs(day["d_el"]).mean()),
        "max_abs_d_az": float(np.abs(day["d_az"]).max()),
        "mean_abs_d_az": float(np.abs(day["d_az"]).mean()),
        "same_side_fraction": float((model_east == ref_east).mean()),
    }
