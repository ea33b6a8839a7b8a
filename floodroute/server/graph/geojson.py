"""Export the routable graph as GeoJSON for map overlays."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from floodroute.server.flood.levels import FloodLevel

if TYPE_CHECKING:
    import networkx as nx


# region API


def build_graph_geojson(
    graph: nx.MultiGraph,
    flood_levels: Mapping[str, int] | None = None,
) -> dict:
    """Convert the graph into a FeatureCollection in map coordinates.

    Junctions become Point features. Each road connection becomes a
    LineString tagged with its road id, length and current flood level.
    """
    levels = flood_levels or {}
    features = []

    for node_id, attrs in graph.nodes(data=True):
        x = attrs.get("x")
        y = attrs.get("y")
        if x is None or y is None:
            raise ValueError(f"Junction {node_id} is missing x/y attributes.")
        features.append(
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [x, y]},
                "properties": {"junction_id": node_id},
            },
        )

    for u, v, key, attrs in graph.edges(keys=True, data=True):
        level = FloodLevel.coerce(levels.get(key))
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": _coords_from_nodes(graph, u, v),
                },
                "properties": {
                    "u": u,
                    "v": v,
                    "road_id": key,
                    "length": attrs.get("length"),
                    "level": int(level),
                    "passable": level < FloodLevel.SEVERE,
                },
            },
        )

    return {"type": "FeatureCollection", "features": features}


# endregion API


# region Conversion helpers


def _coords_from_nodes(
    graph: nx.MultiGraph,
    u: str,
    v: str,
) -> list[list[float]]:
    """Straight segment between two junctions."""
    u_data = graph.nodes[u]
    v_data = graph.nodes[v]
    return [
        [u_data["x"], u_data["y"]],
        [v_data["x"], v_data["y"]],
    ]


# endregion Conversion helpers
