import json
import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Tuple

# camelCase names used by the browser parameter form
_CAMEL_KEYS = {
    "panelChord": "panel_chord",
    "trackerLength": "tracker_length",
    "rowSpacing": "row_spacing",
    "hubHeight": "hub_height",
    "maxRotation": "max_rotation",
    "numberOfRows": "number_of_rows",
    "startTime": "start_time",
    "endTime": "end_time",
}


@dataclass(frozen=True)
class TrackerConfig:
    """
    Configuration of a single-axis tracker array (north-south axis).
    Defaults describe the reference site, Portland ME.
    """
    latitude: float = 43.66
    longitude: float = -70.25   # Informational only
    panel_chord: float = 2.0     # Panel width across the rotation axis (m)
    tracker_length: float = 20.0 # Row length along the axis (m)
    row_spacing: float = 5.0     # Pitch, center to center (m)
    hub_height: float = 1.5      # Axis height above ground (m)
    backtracking: bool = False
    max_rotation: float = 60.0   # Degrees, symmetric
    number_of_rows: int = 5
    start_time: int = 10         # First sampled hour
    end_time: int = 15           # Sampling stops before this hour

    @property
    def gcr(self) -> float:
        """Ground coverage ratio."""
        return self.panel_chord / self.row_spacing

    @property
    def array_width(self) -> float:
        return (self.number_of_rows - 1) * self.row_spacing + self.panel_chord

    @property
    def hour_window(self) -> Tuple[int, int]:
        """
        Clamped [start, end) hour range.
        Always contains at least one hour, even if start_time >= end_time.
        """
        start = max(0, min(23, int(self.start_time)))
        end = max(start + 1, min(24, int(self.end_time)))
        return start, end

    def validate(self) -> None:
        """Raises ValueError listing every problem with the configuration."""
        errors = []
        for name in ("panel_chord", "tracker_length", "row_spacing", "hub_height"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be positive (got {getattr(self, name)})")
        if self.number_of_rows < 1:
            errors.append(f"number_of_rows must be at least 1 (got {self.number_of_rows})")
        if not 0 <= self.max_rotation <= 90:
            errors.append(f"max_rotation must be within [0, 90] (got {self.max_rotation})")
        if not -90 <= self.latitude <= 90:
            errors.append(f"latitude must be within [-90, 90] (got {self.latitude})")

        if errors:
            raise ValueError("Invalid tracker configuration: " + "; ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TrackerConfig":
        known = {f.name for f in dataclasses.fields(TrackerConfig)}
        kwargs = {}
        unknown = []
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            kwargs[name] = value
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        if "backtracking" in kwargs:
            kwargs["backtracking"] = bool(kwargs["backtracking"])
        for name in ("number_of_rows", "start_time", "end_time"):
            if name in kwargs:
                kwargs[name] = int(kwargs[name])
        return TrackerConfig(**kwargs)

    @staticmethod
    def load(path: str) -> "TrackerConfig":
        with open(path, "r") as f:
            data = json.load(f)
        return TrackerConfig.from_dict(data)
