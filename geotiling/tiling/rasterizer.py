"""
Polygon rasterization into tile areas.

Fills a closed polygon with horizontal scanlines (even-odd rule), based on the
public-domain polygon fill by Darel Rex Finley, 2007
(http://alienryderflex.com/polygon_fill/). Every tile on a scanline span is
added to a MergingTileArea, so complete groups collapse into larger tiles
while rasterizing.
"""

import logging
from typing import Iterable, Iterator, Optional, Sequence, Union

import numpy as np

from ..exceptions import InvalidPolygonError
from .area import MergingTileArea
from .models import MAX_MERGE_THRESHOLD, Coordinate, TileSize, TilingConfig
from .tile import Tile

logger = logging.getLogger(__name__)

LATITUDE_MIN = -90.0
LATITUDE_MAX = 90.0
LONGITUDE_MIN = -180.0
LONGITUDE_MAX = 180.0

Vertex = Union[Coordinate, Sequence[float]]


def _steps(start: float, stop: float, increment: float) -> Iterator[float]:
    """Yield start, start + increment, ... while below stop."""
    count = 0
    value = start
    while value < stop:
        yield value
        count += 1
        value = start + count * increment


class PolygonRasterizer:
    """
    Converts a polygon given by its vertices into a MergingTileArea.

    Example:
        >>> rasterizer = PolygonRasterizer(precision=TileSize.DISTRICT)
        >>> area = rasterizer.rasterize([(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)])
        >>> [tile.address for tile in area.covering_tiles()]
        ['6FG2']

    The polygon is not checked for self-intersection, and edges crossing the
    antimeridian are not split. Vertices lying exactly on a scanline have no
    defined edge-inclusion policy.
    """

    def __init__(
        self,
        precision: TileSize = TileSize.DISTRICT,
        max_merged_size: Optional[TileSize] = None,
        merge_threshold: int = MAX_MERGE_THRESHOLD,
        config: Optional[TilingConfig] = None,
    ):
        """
        Initialize the rasterizer.

        Args:
            precision: Size of the tiles the polygon is filled with
            max_merged_size: Largest tile size the resulting area may merge into
                (None = unlimited)
            merge_threshold: Sibling tiles required before merging
            config: Optional TilingConfig to use instead of individual params
        """
        if config is None:
            config = TilingConfig(
                precision=precision,
                max_merged_size=max_merged_size,
                merge_threshold=merge_threshold,
            )

        self.precision = config.precision
        self.max_merged_size = config.max_merged_size
        self.merge_threshold = config.merge_threshold

    def valid_vertices(self, vertices: Iterable[Vertex]) -> np.ndarray:
        """
        Drop vertices that are not valid latitude/longitude pairs.

        Args:
            vertices: (latitude, longitude) pairs

        Returns:
            Array of shape (N, 2) with the remaining vertices, in input order

        Raises:
            InvalidPolygonError: If the input is not a list of pairs
        """
        try:
            points = np.asarray([tuple(vertex) for vertex in vertices], dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidPolygonError("Vertices must be (latitude, longitude) pairs", e) from e

        if points.size == 0:
            return points.reshape(0, 2)
        if points.ndim != 2 or points.shape[1] != 2:
            raise InvalidPolygonError("Vertices must be (latitude, longitude) pairs")

        latitudes, longitudes = points[:, 0], points[:, 1]
        valid = (
            (latitudes >= LATITUDE_MIN) & (latitudes <= LATITUDE_MAX)
            & (longitudes >= LONGITUDE_MIN) & (longitudes <= LONGITUDE_MAX)
        )

        dropped = int(len(points) - valid.sum())
        if dropped:
            logger.warning(f"Dropped {dropped} vertices outside valid latitude/longitude ranges")

        return points[valid]

    def is_valid(self, vertices: Iterable[Vertex]) -> bool:
        """Check if rasterizing these vertices would succeed."""
        try:
            return len(self.valid_vertices(vertices)) >= 3
        except InvalidPolygonError:
            return False

    def rasterize(self, vertices: Iterable[Vertex]) -> MergingTileArea:
        """
        Fill a closed polygon with tiles of the configured precision.

        Args:
            vertices: (latitude, longitude) pairs; the last vertex connects
                back to the first. Invalid pairs are dropped.

        Returns:
            MergingTileArea covering the polygon's interior

        Raises:
            InvalidPolygonError: If fewer than 3 valid vertices remain
        """
        points = self.valid_vertices(vertices)
        if len(points) < 3:
            raise InvalidPolygonError(
                f"A polygon needs at least 3 valid vertices, got {len(points)}"
            )

        latitudes, longitudes = points[:, 0], points[:, 1]
        increment = self.precision.grid_increment

        # Snap the bounding box to tile centers and pad it by one tile, so
        # border tiles are not lost to rounding
        south_west = Tile.from_coordinates(latitudes.min(), longitudes.min(), self.precision).center
        north_east = Tile.from_coordinates(latitudes.max(), longitudes.max(), self.precision).center
        min_latitude = south_west.latitude - increment
        max_latitude = north_east.latitude + increment
        min_longitude = south_west.longitude - increment
        max_longitude = north_east.longitude + increment

        area = MergingTileArea(
            merge_threshold=self.merge_threshold,
            max_merged_size=self.max_merged_size,
        )

        # Edge i runs from vertex i-1 to vertex i
        previous_latitudes = np.roll(latitudes, 1)
        previous_longitudes = np.roll(longitudes, 1)

        scanlines = 0
        for latitude in _steps(min_latitude, max_latitude, increment):
            scanlines += 1
            crossings = self._crossings(
                latitude, latitudes, longitudes, previous_latitudes, previous_longitudes,
            )

            # Consecutive pairs of crossings enclose the polygon's interior
            for west, east in zip(crossings[0::2], crossings[1::2]):
                if west >= max_longitude:
                    break
                if east <= min_longitude:
                    continue

                west = max(west, min_longitude)
                east = min(east, max_longitude)
                for longitude in _steps(west, east, increment):
                    area.add(Tile.from_coordinates(latitude, longitude, self.precision))

        logger.info(
            f"Rasterized {len(points)}-vertex polygon at {self.precision.name} precision: "
            f"{scanlines} scanlines, {len(area)} tiles"
        )
        return area

    @staticmethod
    def _crossings(
        latitude: float,
        latitudes: np.ndarray,
        longitudes: np.ndarray,
        previous_latitudes: np.ndarray,
        previous_longitudes: np.ndarray,
    ) -> np.ndarray:
        """
        Longitudes where polygon edges cross a scanline, sorted west to east.

        An edge only crosses if one end is strictly above and the other strictly
        below the scanline; horizontal edges never count.
        """
        crosses = (
            ((latitudes < latitude) & (previous_latitudes > latitude))
            | ((latitudes > latitude) & (previous_latitudes < latitude))
        )
        lat_i, lng_i = latitudes[crosses], longitudes[crosses]
        lat_j, lng_j = previous_latitudes[crosses], previous_longitudes[crosses]

        return np.sort(lng_i + (latitude - lat_i) / (lat_j - lat_i) * (lng_j - lng_i))


def rasterize(
    vertices: Iterable[Vertex],
    precision: TileSize,
    max_merged_size: Optional[TileSize] = None,
) -> Optional[MergingTileArea]:
    """
    Rasterize a polygon, returning None instead of raising for invalid input.

    Args:
        vertices: (latitude, longitude) pairs of a closed polygon
        precision: Size of the tiles the polygon is filled with
        max_merged_size: Largest tile size the result may merge into

    Returns:
        MergingTileArea covering the polygon, or None if fewer than 3 valid
        vertices were given
    """
    rasterizer = PolygonRasterizer(precision=precision, max_merged_size=max_merged_size)
    try:
        return rasterizer.rasterize(vertices)
    except InvalidPolygonError as e:
        logger.warning(f"Polygon not rasterized: {e}")
        return None
