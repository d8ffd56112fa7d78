"""
Command-line interface for the tile grid.

Usage:
    python -m geotiling tile <address>
    python -m geotiling encode <latitude> <longitude> [--size district]
    python -m geotiling neighbors <address>
    python -m geotiling distance <address> <address>
    python -m geotiling relate <address> <address>
    python -m geotiling rasterize <polygon.json> [--precision district] [--max-merged-size region]
    python -m geotiling --help
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .exceptions import TilingError
from .tiling.area import size_counts
from .tiling.models import Coordinate, TileSize, TilingConfig
from .tiling.rasterizer import PolygonRasterizer
from .tiling.tile import Tile

logger = logging.getLogger(__name__)

SIZE_CHOICES = [size.name.lower() for size in TileSize]


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="geotiling",
        description="Tile grid tools based on Open Location Codes",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tile command
    tile_parser = subparsers.add_parser(
        "tile",
        help="Describe a tile given by its address",
    )
    tile_parser.add_argument("address", type=str, help="Tile address (2-10 characters)")

    # encode command
    encode_parser = subparsers.add_parser(
        "encode",
        help="Find the tile containing a location",
    )
    encode_parser.add_argument("latitude", type=float, help="Latitude in degrees")
    encode_parser.add_argument("longitude", type=float, help="Longitude in degrees")
    encode_parser.add_argument(
        "--size",
        choices=SIZE_CHOICES,
        default="pinpoint",
        help="Tile size (default: pinpoint)",
    )

    # neighbors command
    neighbors_parser = subparsers.add_parser(
        "neighbors",
        help="List the neighboring tiles of a tile",
    )
    neighbors_parser.add_argument("address", type=str, help="Tile address")

    # distance command
    distance_parser = subparsers.add_parser(
        "distance",
        help="Grid distances and direction between two tiles of the same size",
    )
    distance_parser.add_argument("origin", type=str, help="Address of the origin tile")
    distance_parser.add_argument("target", type=str, help="Address of the target tile")

    # relate command
    relate_parser = subparsers.add_parser(
        "relate",
        help="Containment and adjacency between two tiles",
    )
    relate_parser.add_argument("first", type=str, help="Address of the first tile")
    relate_parser.add_argument("second", type=str, help="Address of the second tile")

    # rasterize command
    rasterize_parser = subparsers.add_parser(
        "rasterize",
        help="Cover a polygon with tiles",
    )
    rasterize_parser.add_argument(
        "polygon_path",
        type=str,
        help="JSON file with a list of [latitude, longitude] vertices",
    )
    rasterize_parser.add_argument(
        "--precision",
        choices=SIZE_CHOICES,
        help="Tile size to rasterize with (default: district)",
    )
    rasterize_parser.add_argument(
        "--max-merged-size",
        choices=SIZE_CHOICES,
        help="Largest tile size merging may produce (default: unlimited)",
    )
    rasterize_parser.add_argument(
        "--merge-threshold",
        type=int,
        help="Sibling tiles required before merging (default: 400)",
    )
    rasterize_parser.add_argument(
        "--config",
        type=str,
        help="JSON file with tiling configuration; options given here override it",
    )

    return parser


def load_polygon(path: Path) -> List[Coordinate]:
    """
    Load polygon vertices from a JSON file.

    Vertices are either [latitude, longitude] pairs or objects with
    "latitude" and "longitude" keys.
    """
    with open(path, "r") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Polygon must be a JSON list of vertices, got {type(data).__name__}")

    vertices = []
    for item in data:
        if isinstance(item, dict):
            vertices.append(Coordinate(float(item["latitude"]), float(item["longitude"])))
        else:
            vertices.append(Coordinate(float(item[0]), float(item[1])))
    return vertices


def load_config(args) -> TilingConfig:
    """Build the tiling configuration from an optional file and CLI overrides."""
    data: Dict[str, Any] = {}
    if args.config:
        with open(args.config, "r") as f:
            data = json.load(f)

    if args.precision:
        data["precision"] = args.precision
    if args.max_merged_size:
        data["max_merged_size"] = args.max_merged_size
    if args.merge_threshold is not None:
        data["merge_threshold"] = args.merge_threshold

    return TilingConfig.from_dict(data)


def cmd_tile(args) -> int:
    """Handle tile command."""
    tile = Tile.from_address(args.address)
    print(json.dumps(tile.to_dict(), indent=2))
    return 0


def cmd_encode(args) -> int:
    """Handle encode command."""
    tile = Tile.from_coordinates(args.latitude, args.longitude, TileSize.from_string(args.size))
    output = tile.to_dict()
    output["code"] = tile.code
    print(json.dumps(output, indent=2))
    return 0


def cmd_neighbors(args) -> int:
    """Handle neighbors command."""
    tile = Tile.from_address(args.address)
    output = {
        "address": tile.address,
        "neighbors": [neighbor.address for neighbor in tile.neighbors()],
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_distance(args) -> int:
    """Handle distance command."""
    origin = Tile.from_address(args.origin)
    target = Tile.from_address(args.target)
    output = {
        "origin": origin.address,
        "target": target.address,
        "size": origin.size.name.lower(),
        "manhattan": origin.manhattan_distance(target),
        "chebyshev": origin.chebyshev_distance(target),
        "direction": origin.direction(target),
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_relate(args) -> int:
    """Handle relate command."""
    first = Tile.from_address(args.first)
    second = Tile.from_address(args.second)
    output = {
        "first": first.address,
        "second": second.address,
        "same_tile": first.is_same_tile(second),
        "contains": first.contains(second),
        "contained_by": second.contains(first),
        "neighbor": first.is_neighbor(second),
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_rasterize(args) -> int:
    """Handle rasterize command."""
    polygon_path = Path(args.polygon_path)
    if not polygon_path.exists():
        print(f"Error: Polygon file not found: {polygon_path}", file=sys.stderr)
        return 1

    try:
        vertices = load_polygon(polygon_path)
        config = load_config(args)
    except (OSError, KeyError, IndexError, TypeError, ValueError) as e:
        print(f"Error: Could not load input: {e}", file=sys.stderr)
        return 1

    area = PolygonRasterizer(config=config).rasterize(vertices)
    tiles = sorted(tile.address for tile in area.covering_tiles())

    output = {
        "config": config.to_dict(),
        "vertex_count": len(vertices),
        "tile_count": len(tiles),
        "size_counts": size_counts(area),
        "tiles": tiles,
    }
    print(json.dumps(output, indent=2))
    return 0


COMMANDS = {
    "tile": cmd_tile,
    "encode": cmd_encode,
    "neighbors": cmd_neighbors,
    "distance": cmd_distance,
    "relate": cmd_relate,
    "rasterize": cmd_rasterize,
}


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if not provided)

    Returns:
        Exit code (0 for success)
    """
    parser = setup_argparse()
    parsed = parser.parse_args(args)

    # Configure logging
    log_level = logging.DEBUG if parsed.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if parsed.command is None:
        parser.print_help()
        return 0

    try:
        return COMMANDS[parsed.command](parsed)
    except TilingError as e:
        logger.debug(f"{parsed.command} failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
