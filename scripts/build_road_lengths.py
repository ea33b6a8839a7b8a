"""CLI entrypoint for deriving road lengths from the junction table."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

import orjson

from floodroute.server import config
from floodroute.server.graph.load import estimate_road_lengths, topology_from_mapping

# region Configuration

LOGGER = logging.getLogger(__name__)

# endregion Configuration


# region I/O Helpers


def _write_json(data: dict, output_path: Path) -> None:
    """Persist the road length table to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(
        orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE),
    )
    LOGGER.info(
        "Wrote %d road lengths to %s (%d bytes)",
        len(data),
        output_path,
        output_path.stat().st_size,
    )


# endregion I/O Helpers


# region CLI


def run_cli(args: argparse.Namespace) -> None:
    """Estimate every shared road's length from junction positions."""
    topology = topology_from_mapping(orjson.loads(args.junctions.read_bytes()))
    lengths = estimate_road_lengths(topology.junctions)
    skipped = len(topology.road_ids()) - len(lengths)
    if skipped:
        LOGGER.info("%d roads touch a single junction and keep the fallback", skipped)
    _write_json(lengths, args.output)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments for road length estimation."""
    parser = argparse.ArgumentParser(
        description="Estimate road lengths as the widest span between their junctions.",
    )
    parser.add_argument(
        "--junctions",
        type=Path,
        default=config.JUNCTIONS_FILE,
        help="Path to the junction table JSON.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=config.ROAD_LENGTHS_FILE,
        help="Destination path for the road length table (.json).",
    )
    parser.set_defaults(func=run_cli)
    return parser.parse_args(argv)


def _configure_logging() -> None:
    """Configure a simple logging formatter for CLI runs."""
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
