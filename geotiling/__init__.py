"""
Hierarchical tile grid on top of Open Location Codes.
"""

from .exceptions import (
    TilingError,
    InvalidAddressError,
    SizeMismatchError,
    InvalidCharacterError,
    InvalidPolygonError,
)
from .tiling import (
    Coordinate,
    TileSize,
    TilingConfig,
    Tile,
    TileArea,
    FlatTileArea,
    MergingTileArea,
    PolygonRasterizer,
    rasterize,
)

__version__ = "0.1.0"

__all__ = [
    "TilingError",
    "InvalidAddressError",
    "SizeMismatchError",
    "InvalidCharacterError",
    "InvalidPolygonError",
    "Coordinate",
    "TileSize",
    "TilingConfig",
    "Tile",
    "TileArea",
    "FlatTileArea",
    "MergingTileArea",
    "PolygonRasterizer",
    "rasterize",
]
