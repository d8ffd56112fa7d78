"""
Tiles of the Open Location Code grid.

A tile is the area identified by a prefix of an Open Location Code ("plus
code"). Addresses interleave latitude and longitude digits, coarsest pair
first, so hierarchical containment reduces to string prefixes and grid
distances can be read off the digits directly.

Example:
    >>> tile = Tile.from_address("8CRW2X")
    >>> tile.size
    <TileSize.DISTRICT: (6, 0.05)>
    >>> tile.is_neighbor(Tile.from_address("8CQWXW"))
    True
"""

import math
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

from openlocationcode import openlocationcode as olc

from ..exceptions import InvalidAddressError, InvalidCharacterError, SizeMismatchError
from .models import GRID_SIZE, Coordinate, TileSize


CODE_ALPHABET = "23456789CFGHJMPQRVWX"
SEPARATOR = "+"
SEPARATOR_POSITION = 8
PADDING_CHARACTER = "0"

# 360 degrees of longitude use only 18 of the 20 characters at GLOBAL size
LONGITUDE_CHARACTERS_USED = 18

_CHARACTER_INDEX: Dict[str, int] = {
    **{character: index for index, character in enumerate(CODE_ALPHABET)},
    **{character.lower(): index for index, character in enumerate(CODE_ALPHABET)},
}

# (latitude, longitude) steps: NW, N, NE, E, SE, S, SW, W
_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, -1), (1, 0), (1, 1), (0, 1),
    (-1, 1), (-1, 0), (-1, -1), (0, -1),
)


def character_index(character: str) -> int:
    """
    Get the position of a character in the code alphabet.

    Args:
        character: A single code character (case-insensitive)

    Returns:
        Index 0-19

    Raises:
        InvalidCharacterError: If the character is not part of the alphabet
    """
    try:
        return _CHARACTER_INDEX[character]
    except KeyError:
        raise InvalidCharacterError(f"Character does not exist in alphabet: {character!r}") from None


def address_to_code(address: str) -> str:
    """
    Expand a tile address into a full code for the whole tile.

    Example:
        >>> address_to_code("CVXW")
        'CVXW0000+'
        >>> address_to_code("8FVC9G8F6X")
        '8FVC9G8F+6X'
    """
    if len(address) > SEPARATOR_POSITION:
        return address[:SEPARATOR_POSITION] + SEPARATOR + address[SEPARATOR_POSITION:]
    return address.ljust(SEPARATOR_POSITION, PADDING_CHARACTER) + SEPARATOR


@dataclass(frozen=True)
class Tile:
    """
    An immutable tile of the global grid.

    Two tiles are equal (and hash equally) iff size and address match.

    Attributes:
        address: 2/4/6/8/10-character address, upper case
        size: Tile size matching the address length
        code: The full code this tile was built from; for tiles built from a
            location this is the precise PINPOINT code, not the tile's own code
    """
    address: str
    size: TileSize
    code: str = field(default="", compare=False, repr=False)

    def __post_init__(self):
        """Normalize and validate the address."""
        address = self.address.upper()
        if len(address) != self.size.address_length:
            raise InvalidAddressError(
                f"Address {self.address!r} does not match tile size {self.size.name} "
                f"({self.size.address_length} characters)"
            )
        if not all(character in _CHARACTER_INDEX for character in address):
            raise InvalidAddressError(f"Invalid tile address: {self.address!r}")

        tile_code = address_to_code(address)
        if not olc.isFull(tile_code):
            raise InvalidAddressError(f"Invalid tile address: {self.address!r}")

        object.__setattr__(self, "address", address)
        if not self.code:
            object.__setattr__(self, "code", tile_code)

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float, size: TileSize) -> "Tile":
        """
        Create the tile of the given size containing a location.

        Latitude is clipped to [-90, 90] and longitude normalized to
        [-180, 180) by the encoder.

        Raises:
            InvalidAddressError: If latitude or longitude is infinite or NaN
        """
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            raise InvalidAddressError(f"Cannot encode location ({latitude}, {longitude})")

        try:
            code = olc.encode(latitude, longitude, TileSize.PINPOINT.address_length)
        except ValueError as e:
            raise InvalidAddressError(f"Cannot encode location ({latitude}, {longitude})", e) from e

        address = code.replace(SEPARATOR, "")[:size.address_length]
        return cls(address=address, size=size, code=code)

    @classmethod
    def from_address(cls, address: str) -> "Tile":
        """
        Create a tile from its address; the size follows from the length.

        Raises:
            InvalidAddressError: If the length is not 2, 4, 6, 8 or 10, or the
                address is not a valid code prefix
        """
        size = TileSize.from_address_length(len(address))
        if size is None:
            raise InvalidAddressError(f"Invalid tile address length: {address!r}")
        return cls(address=address, size=size)

    @classmethod
    def from_code(cls, code: str, size: Optional[TileSize] = None) -> "Tile":
        """
        Create a tile from a full Open Location Code.

        Args:
            code: A full (not short) code, possibly padded with '0'
            size: Tile size to use; inferred from the code's padding or length
                when omitted

        Raises:
            InvalidAddressError: If the code is not full, or its padding is
                larger than allowed by the requested size
        """
        if not olc.isFull(code):
            raise InvalidAddressError(f"Only full codes are supported: {code!r}")

        code = code.upper()
        digits = code.replace(SEPARATOR, "")
        padding_start = digits.find(PADDING_CHARACTER)
        available = padding_start if padding_start != -1 else len(digits)

        if size is None:
            size = TileSize.from_address_length(min(available, TileSize.PINPOINT.address_length))
            if size is None:
                raise InvalidAddressError(f"Code does not identify a tile: {code!r}")
        elif available < size.address_length:
            raise InvalidAddressError(
                f"Code {code!r} is less precise than allowed by tile size {size.name}"
            )

        return cls(address=digits[:size.address_length], size=size, code=code)

    @property
    def tile_code(self) -> str:
        """Full code for the whole tile, padded with '0' where needed."""
        return address_to_code(self.address)

    @property
    def address_prefix(self) -> str:
        """Address of the enclosing tile one size up ('' for GLOBAL tiles)."""
        return self.address[:-2]

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(lat_min, lng_min, lat_max, lng_max) of the tile in degrees."""
        area = olc.decode(self.tile_code)
        return (area.latitudeLo, area.longitudeLo, area.latitudeHi, area.longitudeHi)

    @property
    def center(self) -> Coordinate:
        """Center of the tile."""
        area = olc.decode(self.tile_code)
        return Coordinate(area.latitudeCenter, area.longitudeCenter)

    def neighbors(self) -> List["Tile"]:
        """
        Get the typically 8 neighboring tiles of the same size.

        Near the poles, clipping can fold compass offsets back onto this tile
        or onto each other, so fewer than 8 tiles may be returned.
        """
        increment = self.size.grid_increment
        center = self.center

        neighbors: List[Tile] = []
        for lat_step, lng_step in _NEIGHBOR_OFFSETS:
            neighbor = Tile.from_coordinates(
                center.latitude + lat_step * increment,
                center.longitude + lng_step * increment,
                self.size,
            )
            if neighbor != self and neighbor not in neighbors:
                neighbors.append(neighbor)

        return neighbors

    def is_same_tile(self, other: "Tile") -> bool:
        """Check if both tiles have the same size and address."""
        return self.size == other.size and self.address == other.address

    def contains(self, other: "Tile") -> bool:
        """
        Check if the other tile lies within this one (or is this one).

        If A contains B, then B's address has A's address as a prefix.
        """
        return other.address.startswith(self.address)

    def is_neighbor(self, other: "Tile") -> bool:
        """
        Check if the other tile is adjacent to this one (8-neighborhood).

        Tiles of different sizes are adjacent if at least one neighbor of the
        smaller tile, but not the smaller tile itself, lies within the bigger one.
        """
        if other.size == self.size:
            if self.is_same_tile(other):
                return False
            return any(other.is_same_tile(n) for n in self.neighbors())

        if other.size.address_length > self.size.address_length:
            smaller, bigger = other, self
        else:
            smaller, bigger = self, other

        if bigger.contains(smaller):
            return False

        return any(bigger.contains(n) for n in smaller.neighbors())

    def latitudinal_distance(self, other: "Tile") -> int:
        """Signed number of tile rows from the other tile to this one."""
        self._check_same_size(other)
        return self._axis_distance(other, offset=0, wraps=False)

    def longitudinal_distance(self, other: "Tile") -> int:
        """Signed number of tile columns from the other tile to this one, the short way round."""
        self._check_same_size(other)
        return self._axis_distance(other, offset=1, wraps=True)

    def manhattan_distance(self, other: "Tile") -> int:
        """
        City block distance to a tile of the same size.

        Returns:
            Number of tiles traversed getting from one tile to the other

        Raises:
            SizeMismatchError: If the tiles differ in size
        """
        return abs(self.latitudinal_distance(other)) + abs(self.longitudinal_distance(other))

    def chebyshev_distance(self, other: "Tile") -> int:
        """
        Chessboard distance to a tile of the same size.

        Raises:
            SizeMismatchError: If the tiles differ in size
        """
        return max(abs(self.latitudinal_distance(other)), abs(self.longitudinal_distance(other)))

    def direction(self, other: "Tile") -> float:
        """
        Approximate direction of the other tile relative to this one.

        Only a rough approximation, especially for big, distant or near-polar
        tiles.

        Returns:
            Angle in radians, 0 being east and +/- pi being west

        Raises:
            SizeMismatchError: If the tiles differ in size
        """
        return math.atan2(self.latitudinal_distance(other), self.longitudinal_distance(other))

    def _check_same_size(self, other: "Tile") -> None:
        if other.size != self.size:
            raise SizeMismatchError(
                f"Tile sizes don't match: {self.size.name} and {other.size.name}"
            )

    def _axis_distance(self, other: "Tile", offset: int, wraps: bool) -> int:
        distance = 0
        for i in range(offset, self.size.address_length, 2):
            difference = character_index(self.address[i]) - character_index(other.address[i])
            # Longitude wraps at the antimeridian; only the first digit spans the globe
            if wraps and i == offset and abs(difference) > LONGITUDE_CHARACTERS_USED // 2:
                if difference > 0:
                    difference -= LONGITUDE_CHARACTERS_USED
                else:
                    difference += LONGITUDE_CHARACTERS_USED
            distance = distance * GRID_SIZE + difference
        return distance

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        lat_min, lng_min, lat_max, lng_max = self.bounds
        center = self.center
        return {
            "address": self.address,
            "size": self.size.name.lower(),
            "tile_code": self.tile_code,
            "bounds": {
                "lat_min": lat_min,
                "lng_min": lng_min,
                "lat_max": lat_max,
                "lng_max": lng_max,
            },
            "center": {
                "latitude": center.latitude,
                "longitude": center.longitude,
            },
        }
