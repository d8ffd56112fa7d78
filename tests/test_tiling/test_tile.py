"""Tests for tiles of the Open Location Code grid."""

import math

import pytest

from geotiling.exceptions import (
    InvalidAddressError,
    InvalidCharacterError,
    SizeMismatchError,
)
from geotiling.tiling.models import TileSize
from geotiling.tiling.tile import Tile, address_to_code, character_index


class TestHelpers:
    """Tests for module-level helpers."""

    def test_character_index(self):
        """Test lookup of alphabet positions."""
        assert character_index("2") == 0
        assert character_index("X") == 19
        assert character_index("c") == 8

    def test_character_index_invalid(self):
        """Test that characters outside the alphabet are rejected."""
        with pytest.raises(InvalidCharacterError, match="alphabet"):
            character_index("A")

    def test_address_to_code(self):
        """Test padding and separator placement."""
        assert address_to_code("C9") == "C9000000+"
        assert address_to_code("CVXW") == "CVXW0000+"
        assert address_to_code("8FVC9G8F") == "8FVC9G8F+"
        assert address_to_code("8FVC9G8F6X") == "8FVC9G8F+6X"


class TestTileConstruction:
    """Tests for creating tiles."""

    def test_from_address(self):
        """Test that size follows from address length."""
        assert Tile.from_address("8F").size == TileSize.GLOBAL
        assert Tile.from_address("8FVC").size == TileSize.REGION
        assert Tile.from_address("8FVC9G").size == TileSize.DISTRICT
        assert Tile.from_address("8FVC9G8F").size == TileSize.NEIGHBORHOOD
        assert Tile.from_address("8FVC9G8F6X").size == TileSize.PINPOINT

    def test_from_address_lower_case(self):
        """Test that addresses are normalized to upper case."""
        tile = Tile.from_address("8fvc")
        assert tile.address == "8FVC"
        assert tile == Tile.from_address("8FVC")

    def test_from_coordinates(self):
        """Test finding the tile containing a location."""
        assert Tile.from_coordinates(0.5, 0.5, TileSize.REGION).address == "6FG2"
        assert Tile.from_coordinates(0.5, 0.5, TileSize.GLOBAL).address == "6F"

    def test_from_coordinates_keeps_precise_code(self):
        """Test that tiles from a location remember the precise code."""
        tile = Tile.from_coordinates(0.5, 0.5, TileSize.REGION)
        assert len(tile.code.replace("+", "")) == 10
        assert tile.code.startswith("6FG2")
        assert tile.tile_code == "6FG20000+"

    def test_same_block_from_all_constructors(self):
        """Test that every way of building a tile agrees."""
        code = "CCXWXWXW+XW"
        block1 = Tile.from_code(code, TileSize.DISTRICT)
        block2 = Tile.from_address(block1.address)
        center = block1.center
        block3 = Tile.from_coordinates(center.latitude, center.longitude, TileSize.DISTRICT)

        assert block1.is_same_tile(block2)
        assert block2.is_same_tile(block3)
        assert block3.is_same_tile(block1)

    @pytest.mark.parametrize("size", list(TileSize))
    def test_from_code_address_is_prefix(self, size):
        """Test that the address is the code prefix for every size."""
        tile = Tile.from_code("CCXWXWXW+XW", size)
        assert tile.address == "CCXWXWXWXW"[:size.address_length]
        assert tile.size == size

    def test_from_code_infers_size(self):
        """Test size inference from padding and code length."""
        assert Tile.from_code("C9000000+").size == TileSize.GLOBAL
        assert Tile.from_code("8FVC0000+").size == TileSize.REGION
        assert Tile.from_code("8FVC9G8F+").size == TileSize.NEIGHBORHOOD
        assert Tile.from_code("8FVC9G8F+6X").size == TileSize.PINPOINT
        assert Tile.from_code("8FVC9G8F+6XQ").size == TileSize.PINPOINT

    def test_from_code_less_precise_than_size(self):
        """Test that padded codes can't produce smaller tiles."""
        with pytest.raises(InvalidAddressError, match="less precise"):
            Tile.from_code("8FVC0000+", TileSize.DISTRICT)

    def test_from_code_rejects_short_codes(self):
        """Test that short codes are not accepted."""
        with pytest.raises(InvalidAddressError, match="full codes"):
            Tile.from_code("9G8F+6X")

    def test_invalid_length(self):
        """Test that odd or too long addresses are rejected."""
        for address in ["", "8", "8FVC9G8", "8FVC9G8F6XQQ"]:
            with pytest.raises(InvalidAddressError):
                Tile.from_address(address)

    def test_invalid_characters(self):
        """Test that characters outside the alphabet are rejected."""
        with pytest.raises(InvalidAddressError):
            Tile.from_address("8A")

    def test_invalid_first_pair(self):
        """Test that out-of-range latitude/longitude digits are rejected."""
        with pytest.raises(InvalidAddressError):
            Tile.from_address("XX")

    @pytest.mark.parametrize("latitude, longitude", [
        (0.0, float("inf")),
        (0.0, float("-inf")),
        (float("inf"), 0.0),
        (0.0, float("nan")),
        (float("nan"), 0.0),
    ])
    def test_non_finite_location(self, latitude, longitude):
        """Test that infinite or NaN locations are rejected."""
        with pytest.raises(InvalidAddressError, match="Cannot encode location"):
            Tile.from_coordinates(latitude, longitude, TileSize.REGION)

    def test_size_must_match_address(self):
        """Test direct construction with a mismatching size."""
        with pytest.raises(InvalidAddressError, match="does not match tile size"):
            Tile(address="8FVC", size=TileSize.DISTRICT)

    def test_from_coordinates_clips_latitude(self):
        """Test that latitudes beyond the poles end up in the polar tiles."""
        assert Tile.from_coordinates(100.0, 0.0, TileSize.GLOBAL) == Tile.from_coordinates(89.9, 0.0, TileSize.GLOBAL)

    def test_equality_ignores_code(self):
        """Test that tiles compare by size and address only."""
        from_location = Tile.from_coordinates(0.5, 0.5, TileSize.REGION)
        from_address = Tile.from_address("6FG2")
        assert from_location == from_address
        assert hash(from_location) == hash(from_address)
        assert len({from_location, from_address}) == 1

    def test_tiles_are_immutable(self):
        """Test that tiles can't be modified."""
        tile = Tile.from_address("8FVC")
        with pytest.raises(AttributeError):
            tile.address = "9FVC"


class TestTileProperties:
    """Tests for derived tile properties."""

    def test_tile_code(self):
        """Test the full code of a tile."""
        assert Tile.from_address("C9").tile_code == "C9000000+"
        assert Tile.from_address("8FVC9G8F6X").tile_code == "8FVC9G8F+6X"

    def test_address_prefix(self):
        """Test the address of the enclosing tile."""
        assert Tile.from_address("8FVC9G").address_prefix == "8FVC"
        assert Tile.from_address("8F").address_prefix == ""

    def test_bounds(self):
        """Test tile bounds in degrees."""
        lat_min, lng_min, lat_max, lng_max = Tile.from_address("6FG2").bounds
        assert lat_min == pytest.approx(0.0)
        assert lng_min == pytest.approx(0.0)
        assert lat_max == pytest.approx(1.0)
        assert lng_max == pytest.approx(1.0)

    def test_center(self):
        """Test tile center."""
        center = Tile.from_address("6FG2").center
        assert center.latitude == pytest.approx(0.5)
        assert center.longitude == pytest.approx(0.5)

    def test_to_dict(self):
        """Test serialization to dict."""
        d = Tile.from_address("6FG2").to_dict()
        assert d["address"] == "6FG2"
        assert d["size"] == "region"
        assert d["tile_code"] == "6FG20000+"
        assert d["bounds"]["lat_max"] == pytest.approx(1.0)
        assert d["center"]["longitude"] == pytest.approx(0.5)


class TestMembership:
    """Tests for tile containment."""

    def test_contains_smaller_tiles(self):
        """Test that tiles contain the tiles inside them."""
        region = Tile.from_address("8CFF")
        district = Tile.from_address("8CFFXX")
        neighborhood = Tile.from_address("8CFFXXHH")

        assert region.contains(district)
        assert region.contains(neighborhood)
        assert district.contains(neighborhood)

    def test_contains_itself(self):
        """Test that a tile contains itself."""
        tile = Tile.from_address("8CFFXX")
        assert tile.contains(tile)

    def test_does_not_contain_larger_or_other_tiles(self):
        """Test non-members."""
        district = Tile.from_address("8CFFXX")
        assert not district.contains(Tile.from_address("8CFF"))
        assert not district.contains(Tile.from_address("8CXXHHFF"))

    def test_is_same_tile(self):
        """Test identity of tiles."""
        assert Tile.from_address("8CFF").is_same_tile(Tile.from_address("8cff"))
        assert not Tile.from_address("8CFF").is_same_tile(Tile.from_address("8CFFXX"))


class TestAdjacency:
    """Tests for neighbors and adjacency."""

    def test_neighbors(self):
        """Test the 8 neighbors of a tile."""
        tile = Tile.from_address("8CRW2X")
        addresses = {neighbor.address for neighbor in tile.neighbors()}
        assert addresses == {
            "8CRW3W", "8CRW3X", "8CRX32", "8CRX22",
            "8CQXX2", "8CQWXX", "8CQWXW", "8CRW2W",
        }

    def test_neighbors_have_same_size(self):
        """Test that neighbors keep the tile size."""
        for neighbor in Tile.from_address("8CRW2X").neighbors():
            assert neighbor.size == TileSize.DISTRICT

    def test_is_neighbor_same_size(self):
        """Test adjacency of same-sized tiles."""
        tile = Tile.from_address("8CRW2X")
        for address in ["8CRW3W", "8CRX22", "8CQXX2", "8CQWXW"]:
            assert tile.is_neighbor(Tile.from_address(address))
        assert not tile.is_neighbor(Tile.from_address("3FHP99"))

    def test_not_own_neighbor(self):
        """Test that a tile is not adjacent to itself."""
        tile = Tile.from_address("CC")
        assert not tile.is_neighbor(tile)

    @pytest.mark.parametrize("address", ["C2", "22", "CV", "C2X2", "22222222"])
    def test_polar_tiles(self, address):
        """Test that clipping at the poles never makes a tile its own neighbor."""
        tile = Tile.from_address(address)
        neighbors = tile.neighbors()
        assert not tile.is_neighbor(tile)
        assert tile not in neighbors
        assert len(neighbors) < 8
        assert len(set(neighbors)) == len(neighbors)

    def test_neighbor_symmetry(self):
        """Test that adjacency holds in both directions."""
        origins = [Tile.from_address(address) for address in [
            "8CRW2X", "8CRW3W", "8CRX22", "8CQXX2", "8CQWXW", "8CRW2W", "3FHP99",
        ]]
        candidates = list(origins)
        for origin in origins:
            candidates.extend(origin.neighbors())
        for a in candidates:
            for b in candidates:
                assert a.is_neighbor(b) == b.is_neighbor(a), f"{a.address} / {b.address}"

    def test_neighbor_symmetry_global(self):
        """Test symmetric adjacency of GLOBAL tiles, including poles and antimeridian."""
        tiles = [Tile.from_address(address) for address in [
            "C2", "CV", "CF", "8V", "82", "72", "22", "2V", "6F", "6G",
        ]]
        for a in tiles:
            for b in tiles:
                assert a.is_neighbor(b) == b.is_neighbor(a), f"{a.address} / {b.address}"

    def test_neighbor_across_antimeridian(self):
        """Test adjacency wrapping around longitude 180."""
        assert Tile.from_address("8V").is_neighbor(Tile.from_address("72"))

    def test_is_neighbor_different_sizes(self):
        """Test adjacency of differently sized tiles."""
        district = Tile.from_address("8CRW2X")
        assert district.is_neighbor(Tile.from_address("8CRX"))
        assert Tile.from_address("8CRX").is_neighbor(district)
        assert not Tile.from_address("8CRW2W8X").is_neighbor(Tile.from_address("8CRX"))

    def test_containing_tile_is_not_neighbor(self):
        """Test that a tile is not adjacent to a tile containing it."""
        assert not Tile.from_address("8CRW2X").is_neighbor(Tile.from_address("8CRW"))


class TestDistance:
    """Tests for grid distances."""

    def test_distance(self):
        """Test distances between nearby tiles."""
        tile1 = Tile.from_address("9F53")
        tile2 = Tile.from_address("8FXG")
        assert tile1.manhattan_distance(tile2) == 13
        assert tile1.chebyshev_distance(tile2) == 9

    def test_distance_is_symmetric(self):
        """Test that both directions give the same distance."""
        tile1 = Tile.from_address("9F53")
        tile2 = Tile.from_address("8FXG")
        assert tile2.manhattan_distance(tile1) == 13
        assert tile2.chebyshev_distance(tile1) == 9

    def test_distance_scales_with_size(self):
        """Test that the same offset counts 20 times more tiles one size down."""
        tile1 = Tile.from_address("9F5322")
        tile2 = Tile.from_address("8FXG22")
        assert tile1.manhattan_distance(tile2) == 13 * 20
        assert tile1.chebyshev_distance(tile2) == 9 * 20

    def test_distance_wraps_at_antimeridian(self):
        """Test that longitudinal distance takes the shorter way around."""
        assert Tile.from_address("9622").manhattan_distance(Tile.from_address("8VX3")) == 100
        assert Tile.from_address("9622").chebyshev_distance(Tile.from_address("8VX3")) == 99
        assert Tile.from_address("9C22").manhattan_distance(Tile.from_address("8VX3")) == 182
        assert Tile.from_address("9C22").chebyshev_distance(Tile.from_address("8VX3")) == 181
        assert Tile.from_address("9H22").manhattan_distance(Tile.from_address("82X3")) == 142
        assert Tile.from_address("9H22").chebyshev_distance(Tile.from_address("82X3")) == 141

    def test_adjacent_across_antimeridian(self):
        """Test that tiles on both sides of longitude 180 are 1 apart, not 17."""
        west = Tile.from_address("82")
        east = Tile.from_address("8V")
        assert west.manhattan_distance(east) == 1
        assert east.manhattan_distance(west) == 1
        assert west.chebyshev_distance(east) == 1

    def test_distance_to_itself(self):
        """Test zero distance."""
        tile = Tile.from_address("9F53")
        assert tile.manhattan_distance(tile) == 0
        assert tile.chebyshev_distance(tile) == 0

    def test_size_mismatch(self):
        """Test that distances need tiles of the same size."""
        tile1 = Tile.from_address("9F53")
        tile2 = Tile.from_address("9F5322")
        with pytest.raises(SizeMismatchError, match="Tile sizes don't match"):
            tile1.manhattan_distance(tile2)
        with pytest.raises(SizeMismatchError):
            tile1.chebyshev_distance(tile2)
        with pytest.raises(ValueError):
            tile1.direction(tile2)


class TestDirection:
    """Tests for approximate directions between tiles."""

    def test_vertical(self):
        """Test tiles differing in latitude only."""
        tile1 = Tile.from_address("9F53")
        tile2 = Tile.from_address("8FX3")
        assert tile1.direction(tile2) == pytest.approx(math.pi / 2)
        assert tile2.direction(tile1) == pytest.approx(-math.pi / 2)

    def test_horizontal(self):
        """Test tiles differing in longitude only."""
        tile1 = Tile.from_address("9F53")
        tile3 = Tile.from_address("9F5G")
        assert tile1.direction(tile3) == pytest.approx(math.pi)
        assert tile3.direction(tile1) == pytest.approx(0.0)

    def test_diagonal(self):
        """Test tiles differing in both latitude and longitude."""
        tile1 = Tile.from_address("9F53")
        tile4 = Tile.from_address("8FX7")
        assert tile1.direction(tile4) == pytest.approx(0.75 * math.pi)
        assert tile4.direction(tile1) == pytest.approx(-0.25 * math.pi)
