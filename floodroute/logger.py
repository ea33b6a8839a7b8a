"""Tab-separated event log for the route planning pipeline."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import TYPE_CHECKING, Any, Iterator, TextIO

if TYPE_CHECKING:
    import networkx as nx


class LoggingMode(str, Enum):
    """How much of a route request gets reported."""

    NONE = "none"
    INFO = "info"
    DEBUG = "debug"

    @classmethod
    def from_value(cls, value: LoggingMode | str | None) -> LoggingMode:
        """Accept a mode, its name in any case, or `None` for silence."""
        if isinstance(value, cls):
            return value
        wanted = "none" if value is None else str(value).strip().lower()
        for mode in cls:
            if mode.value == wanted:
                return mode
        choices = "/".join(mode.value for mode in cls)
        msg = f"Unknown logging mode {value!r} (use {choices})."
        raise ValueError(msg)


# Minimum mode at which each event level is written.
_THRESHOLDS = {"INFO": 1, "DEBUG": 2}
_VERBOSITY = {LoggingMode.NONE: 0, LoggingMode.INFO: 1, LoggingMode.DEBUG: 2}


@dataclass(slots=True)
class Logger:
    """Writes one ``[LEVEL]<TAB>event<TAB>key=value...`` line per event.

    Lines go to `stream`, or to whatever `sys.stdout` is at write time.
    """

    mode: LoggingMode = LoggingMode.NONE
    stream: TextIO | None = None

    def enabled(self, level: str) -> bool:
        return _VERBOSITY[self.mode] >= _THRESHOLDS[level]

    def info(self, event: str, **context: Any) -> None:  # noqa: ANN401, D102
        self._write("INFO", event, context)

    def debug(self, event: str, **context: Any) -> None:  # noqa: ANN401, D102
        self._write("DEBUG", event, context)

    def graph_stats(self, graph: nx.MultiGraph) -> None:
        """Report junction, road-edge and isolated-junction counts."""
        if not self.enabled("INFO"):
            return
        isolated = [node for node, degree in graph.degree() if degree == 0]
        self.info(
            "graph.stats",
            junctions=graph.number_of_nodes(),
            roads=graph.number_of_edges(),
            isolated=len(isolated) or None,
        )

    def route_outcome(
        self,
        roads: list[str] | None,
        cost: float | None = None,
        length: float | None = None,
    ) -> None:
        if roads is None:
            self.info("route.unreachable")
            return
        self.info(
            "route.ready",
            roads=len(roads),
            cost=_one_decimal(cost),
            length=_one_decimal(length),
        )

    @contextmanager
    def phase(self, name: str, **details: Any) -> Iterator[None]:  # noqa: ANN401
        """Wrap a pipeline step in `.start` and `.complete`/`.failed` events.

        In debug mode a `.elapsed` event with the wall time follows `.complete`.
        """
        if not self.enabled("INFO"):
            yield
            return

        self.info(f"{name}.start", **details)
        started = perf_counter()
        try:
            yield
        except Exception as exc:
            self.info(f"{name}.failed", error=str(exc))
            raise
        self.info(f"{name}.complete", **details)
        self.debug(f"{name}.elapsed", seconds=f"{perf_counter() - started:.4f}")

    def _write(self, level: str, event: str, context: dict[str, Any]) -> None:
        if not self.enabled(level):
            return
        fields = [f"[{level}]", event]
        fields.extend(f"{key}={value}" for key, value in context.items() if value is not None)
        print("\t".join(fields), file=self.stream or sys.stdout)


def _one_decimal(value: float | None) -> str | None:
    return None if value is None else f"{value:.1f}"
