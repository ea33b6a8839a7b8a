"""Static junction/road topology loading for the flood map."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from itertools import combinations
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import orjson

from floodroute.server import config
from floodroute.server.utils.geo import Coordinate, euclidean_distance

# region Types & Configuration

LOGGER = logging.getLogger(__name__)
# Length used for any road without a recorded measurement.
DEFAULT_ROAD_LENGTH = 10.0

# endregion Types & Configuration


# region Models


@dataclass(frozen=True, slots=True)
class Junction:
    """An intersection on the map and the road identifiers that meet there."""

    id: str
    x: float
    y: float
    roads: tuple[str, ...]

    @property
    def position(self) -> Coordinate:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class Topology:
    """Immutable junction table plus the physical length of each road."""

    junctions: Mapping[str, Junction]
    road_lengths: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({}),
    )

    def __contains__(self, junction_id: object) -> bool:
        return junction_id in self.junctions

    def __len__(self) -> int:
        return len(self.junctions)

    def road_length(self, road_id: str) -> float:
        """Return the recorded length of `road_id`, or the fallback length."""
        length = self.road_lengths.get(road_id)
        if length is None:
            return DEFAULT_ROAD_LENGTH
        return length

    def road_ids(self) -> set[str]:
        """Return every road identifier referenced by at least one junction."""
        return {road for junction in self.junctions.values() for road in junction.roads}


# endregion Models


# region API


def load_topology(
    junctions_path: str | Path | None = None,
    road_lengths_path: str | Path | None = None,
) -> Topology:
    """Load the junction table and road lengths from JSON assets.

    Parameters
    ----------
    junctions_path:
        Optional custom path to the junction table. Defaults to
        `config.JUNCTIONS_FILE`.
    road_lengths_path:
        Optional custom path to the road length table. Defaults to
        `config.ROAD_LENGTHS_FILE`. A missing file is tolerated: every road
        then uses `DEFAULT_ROAD_LENGTH`.

    Returns
    -------
    Topology
        Frozen topology ready for `build_graph`.

    """
    junctions_file = Path(junctions_path or config.JUNCTIONS_FILE)
    if not junctions_file.exists():
        msg = f"Junction table not found: {junctions_file}"
        raise FileNotFoundError(msg)
    raw_junctions = orjson.loads(junctions_file.read_bytes())

    lengths_file = Path(road_lengths_path or config.ROAD_LENGTHS_FILE)
    if lengths_file.exists():
        raw_lengths = orjson.loads(lengths_file.read_bytes())
    else:
        LOGGER.warning(
            "Road length table %s not found; using %.1f for every road.",
            lengths_file,
            DEFAULT_ROAD_LENGTH,
        )
        raw_lengths = {}

    topology = topology_from_mapping(raw_junctions, raw_lengths)
    LOGGER.info(
        "Loaded %d junctions / %d road lengths from %s",
        len(topology),
        len(topology.road_lengths),
        junctions_file,
    )
    return topology


def topology_from_mapping(
    junctions: Mapping[str, Mapping[str, Any]],
    road_lengths: Mapping[str, float] | None = None,
) -> Topology:
    """Validate plain mappings and freeze them into a `Topology`."""
    if not isinstance(junctions, Mapping):
        msg = "Junction table must be an object keyed by junction id."
        raise TypeError(msg)

    parsed = {
        str(junction_id): _parse_junction(str(junction_id), entry)
        for junction_id, entry in junctions.items()
    }
    lengths = {
        str(road_id): _parse_length(str(road_id), value)
        for road_id, value in (road_lengths or {}).items()
    }
    return Topology(
        junctions=MappingProxyType(parsed),
        road_lengths=MappingProxyType(lengths),
    )


def estimate_road_lengths(junctions: Mapping[str, Junction]) -> dict[str, float]:
    """Estimate each shared road's length as the widest span between its junctions.

    Roads referenced by a single junction have no measurable span and are
    left out, so they fall back to `DEFAULT_ROAD_LENGTH` at load time.
    """
    positions: dict[str, list[Coordinate]] = {}
    for junction in junctions.values():
        for road_id in junction.roads:
            positions.setdefault(road_id, []).append(junction.position)

    lengths: dict[str, float] = {}
    for road_id, points in positions.items():
        if len(points) < 2:  # noqa: PLR2004
            continue
        span = max(euclidean_distance(a, b) for a, b in combinations(points, 2))
        lengths[road_id] = round(span, 1)
    return lengths


# endregion API


# region Validation helpers


def _parse_junction(junction_id: str, entry: object) -> Junction:
    if not isinstance(entry, Mapping):
        msg = f"Junction {junction_id} must be an object with x, y and roads."
        raise ValueError(msg)

    x, y = entry.get("x"), entry.get("y")
    if not _is_number(x) or not _is_number(y):
        msg = f"Junction {junction_id} must include numeric 'x' and 'y' fields."
        raise ValueError(msg)

    roads = entry.get("roads")
    if not isinstance(roads, (list, tuple)):
        msg = f"Junction {junction_id} must list its roads."
        raise ValueError(msg)

    # Repeated road ids would otherwise produce self-loops in the graph.
    unique_roads = tuple(dict.fromkeys(str(road) for road in roads))
    return Junction(id=junction_id, x=float(x), y=float(y), roads=unique_roads)


def _parse_length(road_id: str, value: object) -> float:
    if not _is_number(value) or value < 0:  # type: ignore[operator]
        msg = f"Road {road_id} length must be a non-negative number, got {value!r}."
        raise ValueError(msg)
    return float(value)  # type: ignore[arg-type]


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


# endregion Validation helpers
