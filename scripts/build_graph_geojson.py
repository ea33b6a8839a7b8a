"""CLI entrypoint for exporting the road graph to GeoJSON."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

import orjson

from floodroute.server import config
from floodroute.server.flood.levels import FloodSnapshot, parse_flood_csv
from floodroute.server.graph.build import build_graph
from floodroute.server.graph.geojson import build_graph_geojson
from floodroute.server.graph.load import load_topology

# region Configuration

LOGGER = logging.getLogger(__name__)
DEFAULT_OUTPUT = config.ASSETS_DIR / "road_graph.geojson"

# endregion Configuration


# region I/O Helpers


def _load_levels(csv_path: Path | None) -> dict[str, int]:
    """Read a sheet CSV export into a severity lookup, if one was given."""
    if csv_path is None:
        return {}
    readings = parse_flood_csv(csv_path.read_text(encoding="utf-8"))
    return FloodSnapshot.from_readings(readings).severities()


def _write_geojson(data: dict, output_path: Path) -> None:
    """Write the GeoJSON FeatureCollection to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
    LOGGER.info(
        "Exported GeoJSON to %s (%d bytes)",
        output_path,
        output_path.stat().st_size,
    )


# endregion I/O Helpers


# region CLI


def run_cli(args: argparse.Namespace) -> None:
    """Build the graph from the junction table and persist it as GeoJSON."""
    topology = load_topology(args.junctions, args.road_lengths)
    graph = build_graph(topology)
    geojson = build_graph_geojson(graph, _load_levels(args.levels_csv))
    _write_geojson(geojson, args.output)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments for exporting GeoJSON."""
    parser = argparse.ArgumentParser(
        description="Convert the junction table into a GeoJSON road graph for QA.",
    )
    parser.add_argument(
        "--junctions",
        type=Path,
        default=config.JUNCTIONS_FILE,
        help="Path to the junction table JSON.",
    )
    parser.add_argument(
        "--road-lengths",
        type=Path,
        default=config.ROAD_LENGTHS_FILE,
        help="Path to the road length table JSON.",
    )
    parser.add_argument(
        "--levels-csv",
        type=Path,
        default=None,
        help="Optional flood sheet CSV export used to tag edges with levels.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help="Destination GeoJSON for validation.",
    )
    parser.set_defaults(func=run_cli)
    return parser.parse_args(argv)


def _configure_logging() -> None:
    """Configure default logging for CLI usage."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    _configure_logging()
    args = parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()

# endregion CLI
