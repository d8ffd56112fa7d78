"""
Tile Grid Module

Addresses rectangular cells of the globe at five fixed sizes, combines them
into areas that merge complete groups of tiles, and rasterizes polygons into
such areas.
"""

from .models import Coordinate, TileSize, TilingConfig
from .tile import Tile, address_to_code, character_index
from .area import TileArea, FlatTileArea, MergingTileArea, size_counts
from .rasterizer import PolygonRasterizer, rasterize

__all__ = [
    # Models
    "Coordinate",
    "TileSize",
    "TilingConfig",
    # Tile
    "Tile",
    "address_to_code",
    "character_index",
    # Areas
    "TileArea",
    "FlatTileArea",
    "MergingTileArea",
    "size_counts",
    # Rasterizer
    "PolygonRasterizer",
    "rasterize",
]
