"""Helpers for expanding a solved junction path into drawable route data."""

from __future__ import annotations

from itertools import pairwise
from typing import TYPE_CHECKING, Mapping, Sequence

from floodroute.server.flood.levels import FloodLevel

if TYPE_CHECKING:
    import networkx as nx

    from floodroute.server.utils.geo import Coordinate


def stitch_path(
    graph: nx.MultiGraph,
    junctions: Sequence[str],
) -> list[Coordinate]:
    """Return the polyline through the junctions of a route."""
    return [(graph.nodes[node]["x"], graph.nodes[node]["y"]) for node in junctions]


def describe_legs(
    graph: nx.MultiGraph,
    junctions: Sequence[str],
    roads: Sequence[str],
    flood_levels: Mapping[str, int],
) -> list[dict[str, object]]:
    """Describe each hop of a route: endpoints, road, length and severity."""
    if len(junctions) != len(roads) + 1:
        msg = "A route with N roads must pass through N + 1 junctions."
        raise ValueError(msg)

    legs: list[dict[str, object]] = []
    for (u, v), road_id in zip(pairwise(junctions), roads):
        attrs = edge_attrs(graph, u, v, road_id)
        legs.append(
            {
                "from": u,
                "to": v,
                "road": road_id,
                "length": attrs["length"],
                "level": int(FloodLevel.coerce(flood_levels.get(road_id))),
            },
        )
    return legs


def edge_attrs(
    graph: nx.MultiGraph,
    u: str,
    v: str,
    road_id: str,
) -> dict:
    """Return the attributes of the edge between `u` and `v` along `road_id`."""
    data = graph.get_edge_data(u, v, key=road_id)
    if data is None:
        msg = f"No road {road_id} between junctions {u} and {v}."
        raise KeyError(msg)
    return data
