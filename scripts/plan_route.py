from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TextIO

import orjson

from floodroute.logger import LoggingMode
from floodroute.plan import plan_route
from floodroute.server.flood.fetch import fetch_flood_snapshot
from floodroute.server.flood.levels import (
    FloodDataError,
    FloodSnapshot,
    parse_flood_csv,
    parse_manual_input,
)
from floodroute.server.graph.load import load_topology
from floodroute.server.search.cost import RoutingPolicy


def echo(message: str = "", *, stream: TextIO = sys.stdout) -> None:
    """Write a line to the chosen stream and flush immediately."""
    stream.write(f"{message}\n")
    stream.flush()


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description=(
            "Plan a route between two junctions under a flood level snapshot and "
            "print it as JSON."
        ),
    )
    parser.add_argument("start", help="Start junction id, e.g. J01.")
    parser.add_argument("end", help="End junction id, e.g. J73.")
    parser.add_argument(
        "-m",
        "--mode",
        choices=[policy.value for policy in RoutingPolicy],
        default=RoutingPolicy.OPTIMAL.value,
        help="Routing policy.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--levels-csv",
        type=Path,
        help="Flood sheet CSV export to route against.",
    )
    source.add_argument(
        "--levels-text",
        type=Path,
        help="File of rows pasted from the sheet (ROAD<TAB>TIME<TAB>LEVEL).",
    )
    source.add_argument(
        "--live",
        action="store_true",
        help="Fetch the current readings from the published sheet.",
    )
    parser.add_argument(
        "--logging",
        choices=[mode.value for mode in LoggingMode],
        default=LoggingMode.NONE.value,
        help="Planning pipeline verbosity.",
    )
    return parser.parse_args()


def load_snapshot(args: argparse.Namespace) -> FloodSnapshot:
    """Return the flood snapshot selected on the command line."""
    if args.live:
        return fetch_flood_snapshot()
    if args.levels_csv is not None:
        return FloodSnapshot.from_readings(
            parse_flood_csv(args.levels_csv.read_text(encoding="utf-8")),
        )
    if args.levels_text is not None:
        return FloodSnapshot.from_readings(
            parse_manual_input(args.levels_text.read_text(encoding="utf-8")),
        )
    return FloodSnapshot()


def main() -> None:
    """Entry point for the route planning CLI."""
    args = parse_args()

    try:
        snapshot = load_snapshot(args)
    except FloodDataError as exc:
        echo(f"Invalid flood data: {exc}", stream=sys.stderr)
        sys.exit(1)

    topology = load_topology()
    result = plan_route(
        topology,
        args.start,
        args.end,
        snapshot.severities(),
        args.mode,
        logging_mode=args.logging,
    )

    echo(orjson.dumps(result.to_dict()).decode())
    if not result.reachable:
        sys.exit(2)


if __name__ == "__main__":
    main()
