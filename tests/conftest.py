from __future__ import annotations

from typing import Callable, Mapping, Sequence

import pytest

from floodroute.server.graph.load import Topology, topology_from_mapping

JunctionSpec = tuple[float, float, Sequence[str]]
TopologyFactory = Callable[..., Topology]


def make_topology(
    junctions: Mapping[str, JunctionSpec],
    road_lengths: Mapping[str, float] | None = None,
) -> Topology:
    """Build a topology from `{id: (x, y, roads)}` shorthand."""
    return topology_from_mapping(
        {
            junction_id: {"x": x, "y": y, "roads": list(roads)}
            for junction_id, (x, y, roads) in junctions.items()
        },
        road_lengths or {},
    )


@pytest.fixture
def topology_factory() -> TopologyFactory:
    return make_topology


@pytest.fixture
def xyz_topology() -> Topology:
    """X --R1(10)-- Y --R2(5)-- Z laid out on a line."""
    return make_topology(
        {
            "X": (0.0, 0.0, ["R1"]),
            "Y": (10.0, 0.0, ["R1", "R2"]),
            "Z": (15.0, 0.0, ["R2"]),
        },
        {"R1": 10.0, "R2": 5.0},
    )


@pytest.fixture
def mesh_topology() -> Topology:
    """Small mesh whose road lengths never undercut straight-line distance."""
    return make_topology(
        {
            "A": (0.0, 0.0, ["ab", "ac", "long"]),
            "B": (10.0, 0.0, ["ab", "bd", "be"]),
            "C": (0.0, 10.0, ["ac", "cd"]),
            "D": (10.0, 10.0, ["bd", "cd", "df"]),
            "E": (20.0, 0.0, ["be", "ef"]),
            "F": (20.0, 10.0, ["df", "ef", "long"]),
            "H": (30.0, 30.0, ["dead_end"]),
        },
        {
            "ab": 12.0,
            "ac": 10.0,
            "bd": 11.0,
            "be": 10.0,
            "cd": 15.0,
            "df": 10.0,
            "ef": 10.5,
            "long": 40.0,
        },
    )
