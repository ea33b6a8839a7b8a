"""Flask API surface for the flood-aware route planner."""

from __future__ import annotations

from threading import Lock
from typing import Mapping

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import BadGateway, BadRequest

from floodroute.plan import plan_route
from floodroute.server import config
from floodroute.server.flood.fetch import fetch_flood_snapshot
from floodroute.server.flood.levels import (
    FloodDataError,
    FloodReading,
    FloodSnapshot,
    parse_flood_csv,
    parse_level,
    parse_manual_input,
)
from floodroute.server.graph.build import build_graph
from floodroute.server.graph.geojson import build_graph_geojson
from floodroute.server.graph.load import load_topology
from floodroute.server.search.cost import RoutingPolicy

app = Flask(__name__)

TOPOLOGY = load_topology()

# The current readings are swapped as a whole; requests read one consistent snapshot.
_SNAPSHOT_LOCK = Lock()
_SNAPSHOT = FloodSnapshot()


def current_snapshot() -> FloodSnapshot:
    with _SNAPSHOT_LOCK:
        return _SNAPSHOT


def replace_snapshot(snapshot: FloodSnapshot) -> FloodSnapshot:
    """Install `snapshot` as the readings used by subsequent requests."""
    global _SNAPSHOT  # noqa: PLW0603
    with _SNAPSHOT_LOCK:
        _SNAPSHOT = snapshot
    return snapshot


def _parse_junction_id(payload: Mapping[str, object], label: str) -> str:
    value = payload.get(label)
    if not isinstance(value, str) or not value:
        msg = f"{label} must be a junction id string."
        raise BadRequest(msg)
    return value


def _parse_levels(payload: object) -> dict[str, int]:
    """Validate an inline `{road id: level}` override."""
    if not isinstance(payload, dict):
        msg = "levels must be an object mapping road ids to flood levels."
        raise BadRequest(msg)
    return {str(road_id): int(parse_level(raw)) for road_id, raw in payload.items()}


def _parse_readings(payload: object) -> list[FloodReading]:
    if not isinstance(payload, list):
        msg = "readings must be an array of {id, time, level} objects."
        raise BadRequest(msg)

    readings: list[FloodReading] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            msg = f"readings[{index}] must include a string 'id'."
            raise BadRequest(msg)
        readings.append(
            FloodReading(
                road_id=item["id"],
                time=str(item.get("time", "")),
                level=parse_level(item.get("level", 0)),
            ),
        )
    return readings


def _snapshot_from_request() -> FloodSnapshot:
    """Build a replacement snapshot from JSON, CSV or pasted spreadsheet rows."""
    if request.is_json:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            msg = "Request body must be a JSON object."
            raise BadRequest(msg)
        if "readings" in payload:
            return FloodSnapshot.from_readings(_parse_readings(payload["readings"]))
        if "levels" in payload:
            levels = payload["levels"]
            if not isinstance(levels, dict):
                msg = "levels must be an object mapping road ids to flood levels."
                raise BadRequest(msg)
            return FloodSnapshot.from_levels(levels, time=str(payload.get("time", "")))
        msg = "Provide either 'readings' or 'levels'."
        raise BadRequest(msg)

    body = request.get_data(as_text=True)
    try:
        if request.mimetype == "text/csv":
            readings = parse_flood_csv(body)
        else:
            readings = parse_manual_input(body)
    except FloodDataError as exc:
        raise BadRequest(str(exc)) from exc
    if not readings:
        msg = "No flood readings found in request body."
        raise BadRequest(msg)
    return FloodSnapshot.from_readings(readings)


@app.after_request
def _inject_cors(response: Response) -> Response:  # type: ignore[override]
    """Allow simple cross-origin requests from the dashboard frontend."""
    response.headers.setdefault("Access-Control-Allow-Origin", "*")
    response.headers.setdefault("Access-Control-Allow-Headers", "Content-Type")
    response.headers.setdefault(
        "Access-Control-Allow-Methods",
        "GET, POST, PUT, OPTIONS",
    )
    return response


@app.get("/api/junctions")
def list_junctions() -> Response:
    """Return the static junction table."""
    return jsonify(
        {
            "junctions": [
                {"id": j.id, "x": j.x, "y": j.y, "roads": list(j.roads)}
                for j in TOPOLOGY.junctions.values()
            ],
        },
    )


@app.get("/api/graph")
def graph_geojson() -> Response:
    """Return the road graph as GeoJSON, tagged with current flood levels."""
    graph = build_graph(TOPOLOGY)
    return jsonify(build_graph_geojson(graph, current_snapshot().severities()))


@app.get("/api/levels")
def get_levels() -> Response:
    return jsonify(
        {**current_snapshot().to_dict(), "refresh_seconds": config.REFRESH_SECONDS},
    )


@app.route("/api/levels", methods=["PUT", "OPTIONS"])
def put_levels() -> Response:
    """Replace the stored flood readings wholesale."""
    if request.method == "OPTIONS":
        return Response("", status=204)
    snapshot = replace_snapshot(_snapshot_from_request())
    return jsonify(snapshot.to_dict())


@app.route("/api/levels/refresh", methods=["POST", "OPTIONS"])
def refresh_levels() -> Response:
    """Pull the latest readings from the published flood sheet."""
    if request.method == "OPTIONS":
        return Response("", status=204)
    try:
        snapshot = fetch_flood_snapshot()
    except FloodDataError as exc:
        raise BadGateway(str(exc)) from exc
    replace_snapshot(snapshot)
    return jsonify(snapshot.to_dict())


@app.route("/api/route", methods=["POST", "OPTIONS"])
def route_planner() -> Response:
    """Plan a route between two junctions under the current flood levels."""
    if request.method == "OPTIONS":
        return Response("", status=204)

    raw_payload = request.get_json(silent=True)
    if raw_payload is None:
        payload: dict[str, object] = {}
    elif isinstance(raw_payload, dict):
        payload = raw_payload
    else:
        msg = "Request body must be a JSON object."
        raise BadRequest(msg)

    start = _parse_junction_id(payload, "start")
    end = _parse_junction_id(payload, "end")

    mode = payload.get("mode")
    if mode is not None and not isinstance(mode, str):
        msg = "mode must be a string."
        raise BadRequest(msg)
    try:
        policy = RoutingPolicy.from_value(mode)
    except ValueError as exc:
        raise BadRequest(str(exc)) from exc

    if payload.get("levels") is not None:
        flood_levels = _parse_levels(payload["levels"])
    else:
        flood_levels = current_snapshot().severities()

    result = plan_route(
        TOPOLOGY,
        start,
        end,
        flood_levels,
        policy,
        logging_mode=config.LOGGING_MODE,
    )
    return jsonify(result.to_dict())


if __name__ == "__main__":  # pragma: no cover
    app.run()
