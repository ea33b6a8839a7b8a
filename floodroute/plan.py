"""High-level entrypoint that wires graph building, A* search and stitching."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

from .logger import Logger, LoggingMode
from .server.graph.build import build_graph
from .server.graph.stitch import describe_legs, stitch_path
from .server.search.astar import astar
from .server.search.cost import RoutingPolicy

if TYPE_CHECKING:
    from .server.graph.load import Topology
    from .server.utils.geo import Coordinate


@dataclass(slots=True)
class RoutePlan:
    """Outcome of one route request; `roads is None` means no route exists."""

    start: str
    end: str
    policy: RoutingPolicy
    roads: list[str] | None
    junctions: list[str] = field(default_factory=list)
    coordinates: list[Coordinate] = field(default_factory=list)
    legs: list[dict[str, object]] = field(default_factory=list)
    cost: float | None = None
    length: float | None = None

    @property
    def reachable(self) -> bool:
        return self.roads is not None

    def to_dict(self) -> dict[str, object]:
        return {
            "start": self.start,
            "end": self.end,
            "mode": self.policy.value,
            "reachable": self.reachable,
            "route": self.roads,
            "junctions": self.junctions,
            "coordinates": [[x, y] for x, y in self.coordinates],
            "legs": self.legs,
            "cost": self.cost,
            "length": self.length,
        }


def plan_route(
    topology: Topology,
    start: str,
    end: str,
    flood_levels: Mapping[str, int],
    policy: RoutingPolicy | str = RoutingPolicy.OPTIMAL,
    logging_mode: LoggingMode | str = LoggingMode.NONE,
) -> RoutePlan:
    """Compute the route between two junctions from the current inputs.

    Parameters
    ----------
    topology:
        Junction table and road lengths. The graph is rebuilt from it on
        every call.
    start, end:
        Junction ids. Unknown ids produce an unreachable plan.
    flood_levels:
        `road id -> severity` snapshot; missing roads count as normal.
    policy:
        `optimal` or `safe`, as a `RoutingPolicy` or its string value.
    logging_mode:
        Controls log verbosity for the planning pipeline.

    """
    policy = RoutingPolicy.from_value(policy)
    logger = Logger(LoggingMode.from_value(logging_mode))

    missing = [junction for junction in (start, end) if junction not in topology]
    if missing:
        logger.info("route.unknown_junction", ids=",".join(missing))
        logger.route_outcome(None)
        return RoutePlan(start=start, end=end, policy=policy, roads=None)

    with logger.phase("graph.build", junctions=len(topology)):
        graph = build_graph(topology)
    logger.graph_stats(graph)

    with logger.phase("search.run", start=start, end=end, mode=policy.value):
        result = astar(graph, start, end, flood_levels, policy)

    if result is None:
        logger.route_outcome(None)
        return RoutePlan(start=start, end=end, policy=policy, roads=None)

    with logger.phase("stitch.path", junctions=len(result.junctions)):
        coordinates = stitch_path(graph, result.junctions)
        legs = describe_legs(graph, result.junctions, result.roads, flood_levels)

    logger.route_outcome(result.roads, cost=result.cost, length=result.length)
    return RoutePlan(
        start=start,
        end=end,
        policy=policy,
        roads=result.roads,
        junctions=result.junctions,
        coordinates=coordinates,
        legs=legs,
        cost=result.cost,
        length=result.length,
    )
