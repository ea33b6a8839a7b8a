from __future__ import annotations

import pytest

from floodroute.server.flood.levels import (
    FloodDataError,
    FloodLevel,
    FloodReading,
    FloodSnapshot,
    parse_flood_csv,
    parse_level,
    parse_manual_input,
)

SHEET_CSV = """STT,Mã đường,Thời gian,Mức ngập
1,T1,23h00 07/12/2025,3
2,PN1,23h00 07/12/2025,1
3,DC1,23h00 07/12/2025,Trung bình
4,,23h00 07/12/2025,2
5,P9,,2
6,short row
"""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (0, FloodLevel.NORMAL),
        (3, FloodLevel.SEVERE),
        (7, FloodLevel.SEVERE),
        (-2, FloodLevel.NORMAL),
        ("2", FloodLevel.MEDIUM),
        (" 1 (rising)", FloodLevel.LOW),
        ("Cao", FloodLevel.SEVERE),
        ("Đỏ", FloodLevel.SEVERE),
        ("vàng", FloodLevel.MEDIUM),
        ("Xanh", FloodLevel.LOW),
        ("red", FloodLevel.SEVERE),
        ("Mức 3", FloodLevel.SEVERE),
        ("Level 2", FloodLevel.MEDIUM),
        ("ngập 1", FloodLevel.LOW),
        ("12", FloodLevel.MEDIUM),
        ("7", FloodLevel.NORMAL),
        ("", FloodLevel.NORMAL),
        ("unknown", FloodLevel.NORMAL),
        (True, FloodLevel.NORMAL),
    ],
)
def test_parse_level(raw, expected) -> None:
    assert parse_level(raw) is expected


@pytest.mark.parametrize(("raw", "expected"), [(None, 0), (-4, 0), (2, 2), (9, 3)])
def test_coerce_clamps_into_range(raw, expected) -> None:
    assert FloodLevel.coerce(raw) == expected


def test_parse_flood_csv_skips_incomplete_rows() -> None:
    readings = parse_flood_csv(SHEET_CSV)

    assert [(r.road_id, r.time, r.level) for r in readings] == [
        ("T1", "23h00 07/12/2025", FloodLevel.SEVERE),
        ("PN1", "23h00 07/12/2025", FloodLevel.LOW),
        ("DC1", "23h00 07/12/2025", FloodLevel.MEDIUM),
    ]


def test_parse_flood_csv_rejects_html() -> None:
    with pytest.raises(FloodDataError, match="HTML"):
        parse_flood_csv("<!DOCTYPE html><html><body>Loading</body></html>")


def test_parse_flood_csv_rejects_header_only() -> None:
    with pytest.raises(FloodDataError, match="empty"):
        parse_flood_csv("STT,Mã đường,Thời gian,Mức ngập\n")


def test_parse_manual_input_handles_tabs_and_spaces() -> None:
    text = "T1\t23h00 07/12/2025\t3\nPN1   23h00 07/12/2025    1\n\nDC1\t2\nlonely\n"

    readings = parse_manual_input(text)

    assert [(r.road_id, r.time, int(r.level)) for r in readings] == [
        ("T1", "23h00 07/12/2025", 3),
        ("PN1", "23h00 07/12/2025", 1),
        ("DC1", "", 2),
    ]


def test_snapshot_last_reading_wins_and_absent_roads_are_normal() -> None:
    snapshot = FloodSnapshot.from_readings(
        [
            FloodReading("T1", "22h00", FloodLevel.LOW),
            FloodReading("T2", "22h00", FloodLevel.MEDIUM),
            FloodReading("T1", "23h00", FloodLevel.SEVERE),
        ],
    )

    assert snapshot.severities() == {"T1": 3, "T2": 2}
    assert snapshot.severity("T1") is FloodLevel.SEVERE
    assert snapshot.severity("elsewhere") is FloodLevel.NORMAL
    assert snapshot.fetched_at is not None


def test_snapshot_from_levels_and_to_dict() -> None:
    snapshot = FloodSnapshot.from_levels({"R1": 2, "R2": "cao"}, time="08:00")

    payload = snapshot.to_dict()

    assert payload["readings"] == [
        {"id": "R1", "time": "08:00", "level": 2},
        {"id": "R2", "time": "08:00", "level": 3},
    ]
    assert isinstance(payload["fetched_at"], str)


def test_parse_flood_csv_reads_digits_inside_level_text() -> None:
    text = "STT,Mã đường,Thời gian,Mức ngập\n1,R2,07:00,Mức 3\n2,R1,07:00,Level 2\n"

    snapshot = FloodSnapshot.from_readings(parse_flood_csv(text))

    assert snapshot.severities() == {"R2": 3, "R1": 2}


def test_snapshot_from_levels_clamps_integers() -> None:
    snapshot = FloodSnapshot.from_levels({"R1": 4, "R2": -1})

    assert snapshot.severities() == {"R1": 3, "R2": 0}
