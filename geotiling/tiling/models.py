"""
Data structures for the tile grid.

Tile sizes, plain coordinates and rasterization settings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, NamedTuple, Optional


# Each tile is subdivided into a 20x20 grid of tiles of the next size
GRID_SIZE = 20
MIN_MERGE_THRESHOLD = 2  # 0 or 1 would snowball every addition into a GLOBAL tile
MAX_MERGE_THRESHOLD = GRID_SIZE * GRID_SIZE


class TileSize(Enum):
    """
    The five fixed tile resolutions, coarsest first.

    Each value is (address_length, grid_increment). The grid increment is the
    edge length of a tile in degrees; the side length in meters varies with
    the tile's latitude.
    """
    GLOBAL = (2, 20.0)  # up to ~2200km
    REGION = (4, 1.0)  # up to ~110km
    DISTRICT = (6, 0.05)  # up to ~5.5km
    NEIGHBORHOOD = (8, 0.0025)  # up to ~275m
    PINPOINT = (10, 0.000125)  # up to ~14m

    @property
    def address_length(self) -> int:
        """Number of characters in the address of a tile of this size."""
        return self.value[0]

    @property
    def grid_increment(self) -> float:
        """Edge length of a tile of this size in degrees."""
        return self.value[1]

    @property
    def coarser(self) -> Optional["TileSize"]:
        """The next larger tile size, or None for GLOBAL."""
        return TileSize.from_address_length(self.address_length - 2)

    @property
    def finer(self) -> Optional["TileSize"]:
        """The next smaller tile size, or None for PINPOINT."""
        return TileSize.from_address_length(self.address_length + 2)

    @classmethod
    def from_address_length(cls, length: int) -> Optional["TileSize"]:
        """Get the TileSize whose addresses have the given length, if any."""
        for size in cls:
            if size.address_length == length:
                return size
        return None

    @classmethod
    def from_string(cls, value: str) -> "TileSize":
        """Get TileSize from its name (case-insensitive)."""
        name = value.strip().upper()
        if name not in cls.__members__:
            valid = ", ".join(size.name.lower() for size in cls)
            raise ValueError(f"Unknown tile size: {value!r} (expected one of: {valid})")
        return cls[name]


class Coordinate(NamedTuple):
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


@dataclass
class TilingConfig:
    """
    Configuration for polygon rasterization.

    Attributes:
        precision: Size of the tiles the polygon is rasterized into
        max_merged_size: Largest tile size merging may produce (None = GLOBAL)
        merge_threshold: Sibling tiles required before they are merged
    """
    precision: TileSize = TileSize.DISTRICT
    max_merged_size: Optional[TileSize] = None
    merge_threshold: int = MAX_MERGE_THRESHOLD

    def __post_init__(self):
        """Validate configuration."""
        if not isinstance(self.precision, TileSize):
            raise ValueError(f"precision must be a TileSize, got {self.precision!r}")
        if self.max_merged_size is not None and not isinstance(self.max_merged_size, TileSize):
            raise ValueError(f"max_merged_size must be a TileSize or None, got {self.max_merged_size!r}")
        if not MIN_MERGE_THRESHOLD <= self.merge_threshold <= MAX_MERGE_THRESHOLD:
            raise ValueError(
                f"merge_threshold must be {MIN_MERGE_THRESHOLD}-{MAX_MERGE_THRESHOLD}, "
                f"got {self.merge_threshold}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "precision": self.precision.name.lower(),
            "max_merged_size": self.max_merged_size.name.lower() if self.max_merged_size else None,
            "merge_threshold": self.merge_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TilingConfig":
        """Create from dictionary."""
        max_merged_size = data.get("max_merged_size")
        return cls(
            precision=TileSize.from_string(data.get("precision", "district")),
            max_merged_size=TileSize.from_string(max_merged_size) if max_merged_size else None,
            merge_threshold=data.get("merge_threshold", MAX_MERGE_THRESHOLD),
        )
