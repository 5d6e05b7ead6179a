import logging
import numpy as np
from dataclasses import dataclass
from shapely.geometry import Polygon, GeometryCollection
from shapely.ops import unary_union

from tracksim.core import constants as C
from tracksim.core.config import TrackerConfig

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class GroundGrid:
    """
    Dense ground raster centred on the array.
    grid[j, i] covers the cell whose centre is
    (x_min + (i + 0.5) * resolution, y_min + (j + 0.5) * resolution).
    """
    grid: np.ndarray # (height, width) float32
    width: int
    height: int
    resolution: float
    x_min: float
    y_min: float

    @staticmethod
    def empty(config: TrackerConfig,
              resolution: float = C.GRID_RESOLUTION,
              margin_x: float = C.GRID_MARGIN_X,
              margin_y: float = C.GRID_MARGIN_Y) -> "GroundGrid":
        array_width = config.array_width
        array_length = config.tracker_length

        x_min = -array_width / 2 - margin_x
        x_max = array_width / 2 + margin_x
        y_min = -array_length / 2 - margin_y
        y_max = array_length / 2 + margin_y

        width = int(np.ceil((x_max - x_min) / resolution))
        height = int(np.ceil((y_max - y_min) / resolution))

        return GroundGrid(
            grid=np.zeros((height, width), dtype=np.float32),
            width=width,
            height=height,
            resolution=resolution,
            x_min=x_min,
            y_min=y_min
        )

    @property
    def x_max(self) -> float:
        return self.x_min + self.width * self.resolution

    @property
    def y_max(self) -> float:
        return self.y_min + self.height * self.resolution

    def cell_centers_x(self) -> np.ndarray:
        return self.x_min + (np.arange(self.width) + 0.5) * self.resolution

    def cell_centers_y(self) -> np.ndarray:
        return self.y_min + (np.arange(self.height) + 0.5) * self.resolution

    def normalized(self, samples: int) -> "GroundGrid":
        """Copy of the grid divided by the sample count (zeros if no samples)."""
        if samples > 0:
            data = (self.grid / np.float32(samples)).astype(np.float32)
        else:
            data = np.zeros_like(self.grid)
        return GroundGrid(data, self.width, self.height, self.resolution, self.x_min, self.y_min)


class GroundShadowRasterizer:
    """
    Projects each row's tilted panel onto the ground along the sun vector
    and counts, per grid cell, how often the cell falls inside a shadow.
    Counts are incidence frequency, not irradiance weighted.
    """
    def __init__(self, config: TrackerConfig):
        self.cfg = config
        self.half_w = config.panel_chord / 2.0
        self.half_l = config.tracker_length / 2.0

    @staticmethod
    def sun_vector(sun_el: float, sun_az: float) -> np.ndarray:
        """Unit vector pointing TO the sun (X=East, Y=North, Z=Up)."""
        rad_az = np.radians(sun_az)
        rad_el = np.radians(sun_el)
        return np.array([
            np.sin(rad_az) * np.cos(rad_el),
            np.cos(rad_az) * np.cos(rad_el),
            np.sin(rad_el)
        ])

    def row_positions(self) -> np.ndarray:
        """Hub x coordinate of every row, row 0 at the west end."""
        n = self.cfg.number_of_rows
        return (np.arange(n) - (n - 1) / 2.0) * self.cfg.row_spacing

    def panel_corners(self, angle_deg: float) -> np.ndarray:
        """
        (4, 3) corner offsets of a panel tilted about the north-south axis,
        relative to its hub.
        """
        theta = np.radians(angle_deg)
        dx = self.half_w * np.cos(theta)
        dz = self.half_w * np.sin(theta)
        return np.array([
            [dx, self.half_l, dz],
            [dx, -self.half_l, dz],
            [-dx, -self.half_l, -dz],
            [-dx, self.half_l, -dz]
        ])

    @staticmethod
    def project_to_ground(points: np.ndarray, sun_vec: np.ndarray) -> np.ndarray:
        """
        Parallel projection of (N, 3) points onto z=0 along the sun direction.
        Returns (N, 2) ground xy. Caller guarantees sun_vec[2] > 0.
        """
        t = points[:, 2] / sun_vec[2]
        projected = points - np.outer(t, sun_vec)
        return projected[:, :2]

    @staticmethod
    def casts_shadow(sun_vec: np.ndarray) -> bool:
        """
        False below the horizon and with the sun overhead, where the
        projection has no horizontal direction.
        """
        if sun_vec[2] <= 0:
            return False
        return bool(np.hypot(sun_vec[0], sun_vec[1]) > C.ZENITH_EPSILON)

    def row_shadows(self, angle_deg: float, sun_vec: np.ndarray) -> list:
        """Ground quadrilateral (4, 2) of each row's shadow."""
        corners = self.panel_corners(angle_deg)
        shadows = []
        for row_x in self.row_positions():
            hub = np.array([row_x, 0.0, self.cfg.hub_height])
            shadows.append(self.project_to_ground(corners + hub, sun_vec))
        return shadows

    def rasterize(self, grid: GroundGrid, polygon: np.ndarray) -> int:
        """
        Adds 1 to every cell whose centre lies inside the polygon (even-odd rule).
        Only the polygon's bounding box, clamped to the grid, is scanned.
        Returns the number of cells incremented.
        """
        res = grid.resolution
        min_x, min_y = polygon.min(axis=0)
        max_x, max_y = polygon.max(axis=0)

        i_min = max(0, int(np.floor((min_x - grid.x_min) / res)))
        i_max = min(grid.width - 1, int(np.floor((max_x - grid.x_min) / res)))
        j_min = max(0, int(np.floor((min_y - grid.y_min) / res)))
        j_max = min(grid.height - 1, int(np.floor((max_y - grid.y_min) / res)))

        if i_min > i_max or j_min > j_max:
            return 0

        xc = grid.x_min + (np.arange(i_min, i_max + 1) + 0.5) * res
        yc = grid.y_min + (np.arange(j_min, j_max + 1) + 0.5) * res
        xc, yc = np.meshgrid(xc, yc) # (rows=j, cols=i)

        inside = np.zeros(xc.shape, dtype=bool)
        n = len(polygon)
        for k in range(n):
            xi, yi = polygon[k]
            xj, yj = polygon[k - 1]
            if yi == yj:
                continue # Horizontal edge never crosses a scanline
            crosses = (yi > yc) != (yj > yc)
            x_cross = (xj - xi) * (yc - yi) / (yj - yi) + xi
            inside ^= crosses & (xc < x_cross)

        grid.grid[j_min:j_max + 1, i_min:i_max + 1] += inside
        return int(inside.sum())

    def accumulate(self, grid: GroundGrid, angle_deg: float, sun_vec: np.ndarray) -> int:
        """
        Rasterizes every row's shadow for one sample into the grid.
        Returns the total number of cell hits added.
        """
        if not self.casts_shadow(sun_vec):
            return 0

        hits = 0
        for quad in self.row_shadows(angle_deg, sun_vec):
            hits += self.rasterize(grid, quad)
        return hits

    def shadow_footprint(self, angle_deg: float, sun_vec: np.ndarray):
        """
        Union of all row shadows as a shapely geometry, for single-moment views.
        Empty when no shadow is cast.
        """
        if not self.casts_shadow(sun_vec):
            return GeometryCollection()

        polys = []
        for quad in self.row_shadows(angle_deg, sun_vec):
            poly = Polygon(quad)
            if not poly.is_valid:
                poly = poly.buffer(0)
            polys.append(poly)

        footprint = unary_union(polys)
        logger.debug("Shadow footprint: %d rows, %.2f m2", len(polys), footprint.area)
        return footprint
