"""Routable graph builder for the junction/road topology."""

from __future__ import annotations

import logging
from itertools import combinations
from typing import TYPE_CHECKING

import networkx as nx
from networkx.readwrite import json_graph

if TYPE_CHECKING:
    from floodroute.server.graph.load import Topology

# region Types & Configuration

Neighbor = tuple[str, str, float]  # (junction id, road id, length)
Adjacency = dict[str, list[Neighbor]]

LOGGER = logging.getLogger(__name__)

# endregion Types & Configuration


# region API


def build_graph(topology: Topology) -> nx.MultiGraph:
    """Return a fresh weighted multigraph derived from the junction table.

    Every junction becomes a node, even when none of its roads is shared.
    Junctions that list the same road id are connected pairwise (a clique
    per road, not a chain), with one edge per road keyed by its id. Edges
    carry the physical `length`; traversal cost is left to the search.
    """
    graph = nx.MultiGraph()
    for junction in topology.junctions.values():
        graph.add_node(junction.id, x=junction.x, y=junction.y)

    for road_id, members in _junctions_by_road(topology).items():
        length = topology.road_length(road_id)
        for u, v in combinations(members, 2):
            graph.add_edge(u, v, key=road_id, road_id=road_id, length=length)

    LOGGER.debug(
        "Graph built with %s nodes / %s edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph


def adjacency(graph: nx.MultiGraph) -> Adjacency:
    """Flatten the graph into `junction -> [(neighbor, road id, length), ...]`."""
    return {
        node: [
            (neighbor, road_id, data["length"])
            for _, neighbor, road_id, data in graph.edges(node, keys=True, data=True)
        ]
        for node in graph.nodes
    }


def serialize_graph(graph: nx.MultiGraph) -> dict:
    """Convert a graph into a node-link mapping in JSON."""
    return json_graph.node_link_data(graph, edges="edges")


# endregion API


# region Helpers


def _junctions_by_road(topology: Topology) -> dict[str, list[str]]:
    """Invert junction -> roads into road -> junctions, keeping table order."""
    members: dict[str, list[str]] = {}
    for junction in topology.junctions.values():
        for road_id in junction.roads:
            members.setdefault(road_id, []).append(junction.id)
    return members


# endregion Helpers
