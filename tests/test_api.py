from __future__ import annotations

import pytest

import floodroute.server.api as api_module
from floodroute.server.flood.levels import FloodDataError, FloodSnapshot


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, xyz_topology):
    monkeypatch.setattr(api_module, "TOPOLOGY", xyz_topology)
    api_module.replace_snapshot(FloodSnapshot())
    api_module.app.config.update(TESTING=True)
    yield api_module.app.test_client()
    api_module.replace_snapshot(FloodSnapshot())


def test_route_uses_stored_snapshot(client) -> None:
    client.put("/api/levels", json={"levels": {"R2": 3}})

    response = client.post("/api/route", json={"start": "X", "end": "Z"})

    assert response.status_code == 200
    assert response.get_json()["route"] is None
    assert response.get_json()["reachable"] is False


def test_route_levels_override_snapshot(client) -> None:
    client.put("/api/levels", json={"levels": {"R2": 3}})

    response = client.post(
        "/api/route",
        json={"start": "X", "end": "Z", "mode": "safe", "levels": {"R2": 2}},
    )

    body = response.get_json()
    assert body["route"] == ["R1", "R2"]
    assert body["mode"] == "safe"
    assert body["junctions"] == ["X", "Y", "Z"]
    assert body["coordinates"] == [[0.0, 0.0], [10.0, 0.0], [15.0, 0.0]]
    assert body["cost"] == pytest.approx(60.0)


def test_route_levels_above_severe_close_the_road(client) -> None:
    body = client.post(
        "/api/route",
        json={"start": "X", "end": "Z", "levels": {"R2": 4}},
    ).get_json()

    assert body["route"] is None
    assert body["reachable"] is False


def test_put_levels_clamps_integer_levels(client) -> None:
    client.put("/api/levels", json={"levels": {"R1": 9, "R2": -3}})

    assert api_module.current_snapshot().severities() == {"R1": 3, "R2": 0}


def test_route_same_junction_is_empty(client) -> None:
    body = client.post("/api/route", json={"start": "Y", "end": "Y"}).get_json()

    assert body["route"] == []
    assert body["reachable"] is True


def test_route_unknown_junction_is_not_an_error(client) -> None:
    response = client.post("/api/route", json={"start": "X", "end": "J99"})

    assert response.status_code == 200
    assert response.get_json()["route"] is None


@pytest.mark.parametrize(
    "payload",
    [
        {"end": "Z"},
        {"start": 5, "end": "Z"},
        {"start": "X", "end": "Z", "mode": "fastest"},
        {"start": "X", "end": "Z", "mode": 1},
        {"start": "X", "end": "Z", "levels": ["R1"]},
    ],
)
def test_route_rejects_bad_payloads(client, payload) -> None:
    assert client.post("/api/route", json=payload).status_code == 400


def test_route_rejects_non_object_body(client) -> None:
    assert client.post("/api/route", json=["X", "Z"]).status_code == 400


def test_route_preflight_has_cors_headers(client) -> None:
    response = client.options("/api/route")

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_put_levels_replaces_wholesale(client) -> None:
    client.put("/api/levels", json={"readings": [{"id": "R1", "time": "07:00", "level": 2}]})
    client.put("/api/levels", json={"readings": [{"id": "R2", "time": "08:00", "level": 1}]})

    body = client.get("/api/levels").get_json()

    assert body["readings"] == [{"id": "R2", "time": "08:00", "level": 1}]
    assert body["refresh_seconds"] > 0


def test_put_levels_accepts_csv_and_pasted_rows(client) -> None:
    csv_body = "STT,Mã đường,Thời gian,Mức ngập\n1,R1,07:00,3\n"
    response = client.put("/api/levels", data=csv_body.encode(), content_type="text/csv")
    assert response.status_code == 200
    assert api_module.current_snapshot().severities() == {"R1": 3}

    pasted = "R2\t08:00\t2\n"
    response = client.put("/api/levels", data=pasted, content_type="text/plain")
    assert response.status_code == 200
    assert api_module.current_snapshot().severities() == {"R2": 2}


@pytest.mark.parametrize(
    ("kwargs"),
    [
        {"json": {"nothing": True}},
        {"json": {"readings": [{"level": 2}]}},
        {"json": {"levels": ["R1"]}},
        {"data": "<!doctype html>", "content_type": "text/csv"},
        {"data": "", "content_type": "text/plain"},
    ],
)
def test_put_levels_rejects_bad_bodies(client, kwargs) -> None:
    assert client.put("/api/levels", **kwargs).status_code == 400


def test_refresh_levels_installs_fetched_snapshot(client, monkeypatch) -> None:
    monkeypatch.setattr(
        api_module,
        "fetch_flood_snapshot",
        lambda: FloodSnapshot.from_levels({"R1": 3}),
    )

    response = client.post("/api/levels/refresh")

    assert response.status_code == 200
    assert api_module.current_snapshot().severities() == {"R1": 3}


def test_refresh_levels_reports_upstream_failure(client, monkeypatch) -> None:
    def _fail() -> FloodSnapshot:
        raise FloodDataError("sheet unavailable")

    monkeypatch.setattr(api_module, "fetch_flood_snapshot", _fail)

    response = client.post("/api/levels/refresh")

    assert response.status_code == 502
    assert api_module.current_snapshot().severities() == {}


def test_junctions_and_graph_endpoints(client) -> None:
    client.put("/api/levels", json={"levels": {"R2": 3}})

    junctions = client.get("/api/junctions").get_json()["junctions"]
    graph = client.get("/api/graph").get_json()

    assert [j["id"] for j in junctions] == ["X", "Y", "Z"]
    edges = [f for f in graph["features"] if f["geometry"]["type"] == "LineString"]
    assert {e["properties"]["road_id"]: e["properties"]["level"] for e in edges} == {
        "R1": 0,
        "R2": 3,
    }
