import numpy as np
from dataclasses import dataclass

from tracksim.core import constants as C
from tracksim.core.config import TrackerConfig


@dataclass(frozen=True)
class TrackerState:
    angle: float # Degrees, signed, positive tilts towards west
    shaded_fraction: float # 0..1 of the chord shaded by the neighbouring row


def profile_slope(sun_el: float, sun_az: float) -> float:
    """
    Tangent of the sun's profile angle in the plane perpendicular to the
    north-south tracker axis. Returns the sentinel slope when the sun is on
    the axis (|sin(az)| ~ 0) and the shadow is effectively vertical.
    """
    with np.errstate(divide='ignore', invalid='ignore'):
        tan_profile = np.tan(np.radians(sun_el)) / abs(np.sin(np.radians(sun_az)))
    if not np.isfinite(tan_profile):
        return C.PROFILE_SLOPE_SENTINEL
    return float(tan_profile)


class SingleAxisRig:
    """
    Horizontal single-axis tracker with a north-south rotation axis.
    Rotation follows true tracking, clamped to the mechanical limit.
    Inter-row shading uses a 1D cross-axis model of identical, infinitely long rows.
    """
    def __init__(self, config: TrackerConfig):
        self.cfg = config

    def get_angle(self, sun_el: float, sun_az: float) -> float:
        """Ideal tracking angle in degrees, clamped to +/- max_rotation."""
        if sun_el <= 0:
            return 0.0
        zenith = np.radians(90.0 - sun_el)
        az_south = np.radians(sun_az - 180.0)
        theta = np.degrees(np.arctan(np.tan(zenith) * np.sin(az_south)))
        # The clamp applies with or without backtracking
        limit = self.cfg.max_rotation
        return float(np.clip(theta, -limit, limit))

    def get_state(self, sun_el: float, sun_az: float) -> TrackerState:
        # Night: parked flat
        if sun_el <= 0:
            return TrackerState(angle=0.0, shaded_fraction=0.0)

        theta = self.get_angle(sun_el, sun_az)

        # Backtracking is assumed to remove inter-row shading entirely
        if self.cfg.backtracking:
            return TrackerState(angle=theta, shaded_fraction=0.0)

        # A lone row has nobody to shade it
        if self.cfg.number_of_rows < 2:
            return TrackerState(angle=theta, shaded_fraction=0.0)

        return TrackerState(angle=theta, shaded_fraction=self._shaded_fraction(theta, sun_el, sun_az))

    def _shaded_fraction(self, theta: float, sun_el: float, sun_az: float) -> float:
        profile = np.arctan(profile_slope(sun_el, sun_az))
        theta_abs = abs(np.radians(theta))
        half_w = self.cfg.panel_chord / 2.0
        pitch = self.cfg.row_spacing

        # Distances measured across the axis from the shading row's hub
        shadow_tip = half_w * np.cos(theta_abs) + half_w * np.sin(theta_abs) / np.tan(profile)
        victim_edge = pitch - half_w * np.cos(theta_abs)
        overlap = shadow_tip - victim_edge

        if overlap <= 0:
            return 0.0
        projected_width = self.cfg.panel_chord * np.cos(theta_abs)
        return float(max(0.0, min(1.0, overlap / projected_width)))


def tracker_state(sun_el: float, sun_az: float, config: TrackerConfig) -> TrackerState:
    return SingleAxisRig(config).get_state(sun_el, sun_az)
