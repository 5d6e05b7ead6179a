import logging
import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Optional

from tracksim.core import constants as C
from tracksim.core.config import TrackerConfig
from tracksim.core.solar import solar_position
from tracksim.physics.kinematics import SingleAxisRig
from tracksim.physics.shadows import GroundGrid, GroundShadowRasterizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyStat:
    month: str
    avg_shading: float # Irradiance weighted shaded fraction
    total_irradiance: float


@dataclass(frozen=True)
class HeatmapPoint:
    day: int
    hour: int
    shading: float
    irradiance: float


@dataclass(frozen=True)
class InstantState:
    tracker_angle: float
    sun_elevation: float
    sun_azimuth: float
    profile_angle_rad: float # Sun direction in the east-west display plane
    is_valid: bool


@dataclass(frozen=True)
class SimulationResult:
    total_aswa: float
    shading_loss_percent: float
    monthly_data: List[MonthlyStat]
    hourly_heatmap: List[HeatmapPoint]
    ground_heatmap: GroundGrid
    daylight_samples: int = 0

    def summary(self) -> Dict[str, float]:
        return {
            "total_aswa": self.total_aswa,
            "shading_loss_percent": self.shading_loss_percent,
            "daylight_samples": self.daylight_samples,
            "peak_ground_shading": float(self.ground_heatmap.grid.max()) if self.ground_heatmap.grid.size else 0.0,
        }

    def monthly_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(m) for m in self.monthly_data],
                            columns=["month", "avg_shading", "total_irradiance"])

    def hourly_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(p) for p in self.hourly_heatmap],
                            columns=["day", "hour", "shading", "irradiance"])


def clear_sky_irradiance(sun_el: float) -> float:
    """
    Simplified clear-sky beam irradiance (W/m2) with Kasten-Young air mass.
    Only meaningful for sun_el > 0.
    """
    zenith = 90.0 - sun_el
    air_mass = 1.0 / (np.cos(np.radians(zenith)) +
                      C.KASTEN_YOUNG_A * (C.KASTEN_YOUNG_B - zenith) ** C.KASTEN_YOUNG_C)
    return float(C.SOLAR_CONSTANT * C.ATMOSPHERIC_TRANSMITTANCE ** (air_mass ** C.TRANSMITTANCE_EXPONENT))


class SimulationRunner:
    """
    Annual inter-row shading simulation over a sampled year:
    12 synthetic 30-day months, every 5th day, hourly within the configured window.
    Each run owns its grid and accumulators; runners share nothing.
    """
    def __init__(self, config: TrackerConfig,
                 progress: Optional[Callable[[int, int], None]] = None):
        self.cfg = config
        self.rig = SingleAxisRig(config)
        self.rasterizer = GroundShadowRasterizer(config)
        self.progress = progress

    def sample_days(self, month: int) -> range:
        start_day = month * C.DAYS_PER_MONTH
        return range(start_day, start_day + C.DAYS_PER_MONTH, C.DAY_STEP)

    def sample_hours(self) -> range:
        start_h, end_h = self.cfg.hour_window
        return range(start_h, end_h, C.HOUR_STEP)

    def run(self) -> SimulationResult:
        grid = GroundGrid.empty(self.cfg)
        logger.info("Ground grid %dx%d cells at %.2f m (x_min=%.2f, y_min=%.2f)",
                    grid.width, grid.height, grid.resolution, grid.x_min, grid.y_min)

        monthly_data: List[MonthlyStat] = []
        hourly_heatmap: List[HeatmapPoint] = []
        total_weighted_shade = 0.0
        total_irradiance = 0.0
        daylight_samples = 0

        hours = self.sample_hours()
        total_days = C.MONTHS * len(self.sample_days(0))
        days_done = 0

        for m in range(C.MONTHS):
            month_shade = 0.0
            month_irr = 0.0

            for doy in self.sample_days(m):
                for h in hours:
                    sun = solar_position(doy, h, self.cfg.latitude)
                    if sun.elevation <= 0:
                        continue
                    daylight_samples += 1

                    # 1. Panel shading, weighted by clear-sky irradiance
                    irradiance = clear_sky_irradiance(sun.elevation)
                    state = self.rig.get_state(sun.elevation, sun.azimuth)

                    shade_value = state.shaded_fraction * irradiance
                    month_shade += shade_value
                    month_irr += irradiance

                    hourly_heatmap.append(HeatmapPoint(
                        day=doy,
                        hour=h,
                        shading=state.shaded_fraction,
                        irradiance=irradiance
                    ))

                    # 2. Ground shadow incidence
                    sun_vec = self.rasterizer.sun_vector(sun.elevation, sun.azimuth)
                    self.rasterizer.accumulate(grid, state.angle, sun_vec)

                days_done += 1
                if self.progress is not None:
                    self.progress(days_done, total_days)

            total_weighted_shade += month_shade
            total_irradiance += month_irr

            avg = month_shade / month_irr if month_irr > 0 else 0.0
            monthly_data.append(MonthlyStat(
                month=C.MONTH_NAMES[m],
                avg_shading=avg,
                total_irradiance=month_irr
            ))
            logger.debug("%s: avg shading %.4f, irradiance %.1f", C.MONTH_NAMES[m], avg, month_irr)

        loss_pct = total_weighted_shade / total_irradiance * 100.0 if total_irradiance > 0 else 0.0
        logger.info("Simulation complete: %d daylight samples, loss %.3f%%, ASWA %.1f",
                    daylight_samples, loss_pct, total_weighted_shade)

        return SimulationResult(
            total_aswa=total_weighted_shade,
            shading_loss_percent=loss_pct,
            monthly_data=monthly_data,
            hourly_heatmap=hourly_heatmap,
            ground_heatmap=grid.normalized(daylight_samples),
            daylight_samples=daylight_samples
        )


def simulate_year(config: TrackerConfig,
                  progress: Optional[Callable[[int, int], None]] = None) -> SimulationResult:
    return SimulationRunner(config, progress=progress).run()


def get_instantaneous_state(day_of_year: int, hour: float, config: TrackerConfig) -> InstantState:
    """
    Sun and tracker state for a single moment, without the annual loop.
    """
    sun = solar_position(day_of_year, hour, config.latitude)
    angle = SingleAxisRig(config).get_angle(sun.elevation, sun.azimuth)

    rad_az = np.radians(sun.azimuth)
    rad_el = np.radians(sun.elevation)

    # East-west display plane: +X towards the west, +Y up
    vis_x = -np.cos(rad_el) * np.sin(rad_az)
    vis_y = np.sin(rad_el)

    return InstantState(
        tracker_angle=angle,
        sun_elevation=sun.elevation,
        sun_azimuth=sun.azimuth,
        profile_angle_rad=float(np.arctan2(vis_y, vis_x)),
        is_valid=sun.elevation > 0
    )
