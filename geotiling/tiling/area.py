"""
Areas defined by one or more tiles.

Two implementations share the TileArea protocol: FlatTileArea simply collects
tiles, MergingTileArea groups tiles by their parent address and replaces a
complete group of siblings by the parent tile.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional, Protocol, Union

from .models import MAX_MERGE_THRESHOLD, MIN_MERGE_THRESHOLD, TileSize
from .tile import Tile

logger = logging.getLogger(__name__)

# Group key for GLOBAL tiles, which have no enclosing tile
GLOBAL_KEY = ""


class TileArea(Protocol):
    """
    An area covered by tiles.

    Adding a tile means that afterwards contains() is true for that tile and
    every tile inside it (e.g. "C9C9" and "C9C9XXXX").
    """

    @property
    def smallest_tile_size(self) -> TileSize:
        """Size of the smallest (longest-address) tile used by this area."""
        ...

    def add(self, tile: Tile) -> None:
        """Add the area of a tile to this area."""
        ...

    def add_area(self, other: "TileArea") -> None:
        """Add every tile covering another area to this area."""
        ...

    def contains(self, tile_or_code: Union[Tile, str]) -> bool:
        """Check if the whole tile (or full code) lies inside this area."""
        ...

    def contains_location(self, latitude: float, longitude: float) -> bool:
        """Check if a location lies inside this area."""
        ...

    def covering_tiles(self) -> List[Tile]:
        """Tiles that together cover this area, in no particular order."""
        ...


def _as_tile(tile_or_code: Union[Tile, str]) -> Tile:
    if isinstance(tile_or_code, Tile):
        return tile_or_code
    return Tile.from_code(tile_or_code)


def size_counts(area: TileArea) -> Dict[str, int]:
    """
    Count the covering tiles of an area per tile size.

    Returns:
        Mapping of lower-case size name to count, coarsest size first,
        sizes without tiles omitted
    """
    counts = Counter(tile.size for tile in area.covering_tiles())
    return {size.name.lower(): counts[size] for size in TileSize if counts[size]}


class FlatTileArea:
    """
    Collects all tiles added to it.

    No merging and no cleanup of smaller tiles when an enclosing tile is added
    later; contains() scans every tile.
    """

    def __init__(self, tiles: Optional[Iterable[Tile]] = None):
        self._tiles: List[Tile] = []
        self._smallest_tile_size = TileSize.GLOBAL

        for tile in tiles or []:
            self.add(tile)

    @property
    def smallest_tile_size(self) -> TileSize:
        return self._smallest_tile_size

    def add(self, tile: Tile) -> None:
        if self.contains(tile):
            return

        self._tiles.append(tile)
        if tile.size.address_length > self._smallest_tile_size.address_length:
            self._smallest_tile_size = tile.size

    def add_area(self, other: TileArea) -> None:
        for tile in other.covering_tiles():
            self.add(tile)

    def contains(self, tile_or_code: Union[Tile, str]) -> bool:
        tile = _as_tile(tile_or_code)
        return any(member.contains(tile) for member in self._tiles)

    def contains_location(self, latitude: float, longitude: float) -> bool:
        return self.contains(Tile.from_coordinates(latitude, longitude, self._smallest_tile_size))

    def covering_tiles(self) -> List[Tile]:
        return list(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)


class MergingTileArea:
    """
    Area that merges complete groups of sibling tiles into their parent tile.

    Tiles are kept in groups keyed by their parent address. Once a group
    reaches merge_threshold tiles (all 400 = 20x20 subtiles by default), the
    group is replaced by the parent tile, which may in turn complete the next
    group up.

    Example:
        >>> area = MergingTileArea(max_merged_size=TileSize.REGION)
        >>> area.add(Tile.from_address("8FVC9G"))
        >>> area.contains(Tile.from_address("8FVC9G8F"))
        True
    """

    def __init__(
        self,
        merge_threshold: int = MAX_MERGE_THRESHOLD,
        max_merged_size: Optional[TileSize] = None,
        tiles: Optional[Iterable[Tile]] = None,
    ):
        """
        Initialize a merging tile area.

        Args:
            merge_threshold: Number of sibling tiles that get merged into their
                parent; clamped to 2-400
            max_merged_size: Largest tile size merging may produce
                (None = GLOBAL, i.e. unlimited)
            tiles: Optional tiles to add initially
        """
        self.merge_threshold = min(max(merge_threshold, MIN_MERGE_THRESHOLD), MAX_MERGE_THRESHOLD)
        self.max_merged_size = max_merged_size or TileSize.GLOBAL

        # Insertion-ordered address -> tile, per parent address
        self._groups: Dict[str, Dict[str, Tile]] = {}
        self._smallest_tile_size = TileSize.GLOBAL

        for tile in tiles or []:
            self.add(tile)

    @property
    def smallest_tile_size(self) -> TileSize:
        return self._smallest_tile_size

    def contains(self, tile_or_code: Union[Tile, str]) -> bool:
        tile = _as_tile(tile_or_code)

        # Only groups filed under one of the tile's ancestor addresses can contain it
        prefix = tile.address
        while prefix:
            prefix = prefix[:-2]
            group = self._groups.get(prefix)
            if group is None:
                continue
            member = group.get(tile.address[:len(prefix) + 2])
            if member is not None and member.contains(tile):
                return True

        return False

    def contains_location(self, latitude: float, longitude: float) -> bool:
        return self.contains(Tile.from_coordinates(latitude, longitude, self._smallest_tile_size))

    def add(self, tile: Tile) -> None:
        if self.contains(tile):
            return

        if tile.size.address_length > self._smallest_tile_size.address_length:
            self._smallest_tile_size = tile.size

        # Merging can cascade at most from PINPOINT up to GLOBAL
        candidate: Optional[Tile] = tile
        while candidate is not None:
            candidate = self._add_non_contained(candidate)

    def _add_non_contained(self, tile: Tile) -> Optional[Tile]:
        """
        File a tile that is not contained yet.

        Returns:
            The parent tile to add next if this tile completed its group,
            None otherwise
        """
        if tile.size.address_length < self._smallest_tile_size.address_length:
            self._discard_descendants(tile)

        key = tile.address_prefix
        group = self._groups.get(key)

        if group is None:
            self._groups[key] = {tile.address: tile}
            return None

        # Not merging if the group is incomplete, consists of GLOBAL tiles, or
        # the tile is already as large as merging is allowed to go
        if (len(group) < self.merge_threshold - 1
                or key == GLOBAL_KEY
                or tile.size.address_length <= self.max_merged_size.address_length):
            group[tile.address] = tile
            return None

        # The parent can't be contained yet; otherwise contains() would have
        # been true for the tile that started this cascade
        del self._groups[key]
        parent = Tile.from_address(key)
        logger.debug(f"Merged {len(group) + 1} {tile.size.name} tiles into {parent.address}")
        return parent

    def _discard_descendants(self, tile: Tile) -> None:
        """Drop groups of tiles lying within a tile that is about to be added."""
        for key in [key for key in self._groups if key.startswith(tile.address)]:
            del self._groups[key]

    def add_area(self, other: TileArea) -> None:
        for tile in other.covering_tiles():
            self.add(tile)

    def covering_tiles(self) -> List[Tile]:
        tiles: List[Tile] = []
        for group in self._groups.values():
            tiles.extend(group.values())
        return tiles

    def __len__(self) -> int:
        return sum(len(group) for group in self._groups.values())
