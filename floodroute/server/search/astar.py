"""A* search between two junctions under live flood severities."""

from __future__ import annotations

from dataclasses import dataclass, field
from heapq import heappop, heappush
from itertools import count
from typing import TYPE_CHECKING, Mapping

from floodroute.server.graph.build import build_graph
from floodroute.server.search.cost import RoutingPolicy, edge_weight
from floodroute.server.utils.geo import euclidean_distance

if TYPE_CHECKING:
    import networkx as nx

    from floodroute.server.graph.load import Topology


@dataclass(slots=True)
class SearchResult:
    """Container for a solved route."""

    roads: list[str]
    junctions: list[str]
    cost: float
    length: float = field(default=0.0)


def find_path(
    topology: Topology,
    start: str,
    end: str,
    flood_levels: Mapping[str, int],
    policy: RoutingPolicy | str = RoutingPolicy.OPTIMAL,
) -> list[str] | None:
    """Return the road ids from `start` to `end`, or `None` when unreachable.

    The graph is rebuilt from `topology` on every call so the result always
    reflects the current junction table and readings. Roads missing from
    `flood_levels` are treated as normal.
    """
    result = astar(build_graph(topology), start, end, flood_levels, policy)
    return None if result is None else result.roads


def astar(
    graph: nx.MultiGraph,
    source: str,
    target: str,
    flood_levels: Mapping[str, int],
    policy: RoutingPolicy | str = RoutingPolicy.OPTIMAL,
) -> SearchResult | None:
    """Run A* from `source` until `target` is settled.

    Frontier entries are ordered by `f = g + h` and then by insertion order,
    so equal-cost ties always resolve the same way. A closed junction is
    reopened when a cheaper path to it turns up later.
    """
    policy = RoutingPolicy.from_value(policy)
    if source not in graph or target not in graph:
        return None
    if source == target:
        return SearchResult(roads=[], junctions=[source], cost=0.0)

    goal = graph.nodes[target]
    sequence = count()
    frontier: list[tuple[float, int, str]] = [
        (_heuristic(graph.nodes[source], goal), next(sequence), source),
    ]
    g_score: dict[str, float] = {source: 0.0}
    # came_from maps a junction to (previous junction, road id, road length).
    came_from: dict[str, tuple[str, str, float]] = {}
    closed: set[str] = set()

    while frontier:
        _, _, node = heappop(frontier)
        if node == target:
            return _reconstruct(came_from, source, target, g_score[target])
        if node in closed:
            continue
        closed.add(node)

        for _, neighbor, road_id, data in graph.edges(node, keys=True, data=True):
            length = data["length"]
            weight = edge_weight(length, flood_levels.get(road_id), policy)
            if weight is None:
                continue
            tentative = g_score[node] + weight
            if tentative >= g_score.get(neighbor, float("inf")):
                continue
            g_score[neighbor] = tentative
            came_from[neighbor] = (node, road_id, length)
            closed.discard(neighbor)
            f_score = tentative + _heuristic(graph.nodes[neighbor], goal)
            heappush(frontier, (f_score, next(sequence), neighbor))

    return None


def _heuristic(node: Mapping, goal: Mapping) -> float:
    """Straight-line distance to the goal; zero when a position is unknown."""
    if node.get("x") is None or goal.get("x") is None:
        return 0.0
    return euclidean_distance((node["x"], node["y"]), (goal["x"], goal["y"]))


def _reconstruct(
    came_from: Mapping[str, tuple[str, str, float]],
    source: str,
    target: str,
    cost: float,
) -> SearchResult:
    """Walk predecessor links back from `target` and emit road ids in travel order."""
    roads: list[str] = []
    junctions: list[str] = [target]
    length = 0.0
    node = target
    while node != source:
        previous, road_id, road_length = came_from[node]
        roads.append(road_id)
        junctions.append(previous)
        length += road_length
        node = previous

    roads.reverse()
    junctions.reverse()
    return SearchResult(roads=roads, junctions=junctions, cost=cost, length=length)
