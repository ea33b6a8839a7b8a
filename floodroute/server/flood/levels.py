"""Flood severity readings and parsers for the published water-level sheet."""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Iterable, Mapping

LOGGER = logging.getLogger(__name__)

# Sheet layout: column 0 is a row label, then road id, time and level.
ID_COLUMN = 1
TIME_COLUMN = 2
LEVEL_COLUMN = 3
MIN_SHEET_COLUMNS = 4
MIN_MANUAL_COLUMNS = 2

_LEADING_INT = re.compile(r"^\s*(-?\d+)")
_MANUAL_SPLIT = re.compile(r"\t+|\s{2,}")

# Fallback for free-text level cells, checked from most to least severe.
# A bare digit anywhere in the cell ("Mức 3") counts like its label.
_LEVEL_KEYWORDS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (3, ("cao", "đỏ", "high", "red", "3")),
    (2, ("trung", "vàng", "medium", "yellow", "2")),
    (1, ("thấp", "xanh", "low", "green", "1")),
)


class FloodDataError(ValueError):
    """Raised when flood level data cannot be fetched or parsed."""


class FloodLevel(IntEnum):
    """Flood severity attached to a road at a point in time."""

    NORMAL = 0
    LOW = 1
    MEDIUM = 2
    SEVERE = 3

    @classmethod
    def coerce(cls, value: int | None) -> FloodLevel:
        """Clamp a raw severity into the supported range; `None` means normal."""
        if value is None:
            return cls.NORMAL
        return cls(min(max(int(value), cls.NORMAL), cls.SEVERE))


@dataclass(frozen=True, slots=True)
class FloodReading:
    """One sheet row: a road's flood level and the time it was reported."""

    road_id: str
    time: str
    level: FloodLevel

    def to_dict(self) -> dict[str, object]:
        return {"id": self.road_id, "time": self.time, "level": int(self.level)}


@dataclass(frozen=True, slots=True)
class FloodSnapshot:
    """Complete set of readings from one refresh; replaced, never merged."""

    readings: Mapping[str, FloodReading] = field(default_factory=dict)
    fetched_at: datetime | None = None

    @classmethod
    def from_readings(
        cls,
        readings: Iterable[FloodReading],
        fetched_at: datetime | None = None,
    ) -> FloodSnapshot:
        """Index readings by road; a later row for the same road wins."""
        indexed = {reading.road_id: reading for reading in readings}
        return cls(readings=indexed, fetched_at=fetched_at or _utcnow())

    @classmethod
    def from_levels(
        cls,
        levels: Mapping[str, object],
        time: str = "",
    ) -> FloodSnapshot:
        """Build a snapshot from a plain `road id -> level` mapping."""
        return cls.from_readings(
            FloodReading(road_id=str(road_id), time=time, level=parse_level(raw))
            for road_id, raw in levels.items()
        )

    def severity(self, road_id: str) -> FloodLevel:
        reading = self.readings.get(road_id)
        return FloodLevel.NORMAL if reading is None else reading.level

    def severities(self) -> dict[str, int]:
        """Return the `road id -> severity` lookup consumed by the search."""
        return {road_id: int(reading.level) for road_id, reading in self.readings.items()}

    def to_dict(self) -> dict[str, object]:
        return {
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "readings": [reading.to_dict() for reading in self.readings.values()],
        }


# region Parsing


def parse_level(raw: object) -> FloodLevel:
    """Interpret a level cell as a `FloodLevel`.

    Integers are clamped into 0-3, so anything above 3 closes the road.
    Text starting with 0-3 is taken as-is. Any other text is matched against
    the sheet's colour/intensity labels and the digits 3, 2, 1 (in that
    order), and defaults to `FloodLevel.NORMAL` when nothing matches.
    """
    if isinstance(raw, bool):
        return FloodLevel.NORMAL
    if isinstance(raw, int):
        return FloodLevel.coerce(raw)

    text = str(raw).strip()
    match = _LEADING_INT.match(text)
    if match is not None:
        number = int(match.group(1))
        if _in_range(number):
            return FloodLevel(number)

    lowered = text.lower()
    for level, keywords in _LEVEL_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return FloodLevel(level)
    return FloodLevel.NORMAL


def parse_flood_csv(text: str) -> list[FloodReading]:
    """Parse the sheet's CSV export into readings.

    The first row is a header. Rows with too few columns or a blank road id
    or time are skipped.

    Raises
    ------
    FloodDataError
        When the body is an HTML page (sheet not yet published) or no row
        yields a reading.

    """
    if text.strip().lower().startswith("<!doctype html"):
        msg = "Flood sheet returned an HTML page instead of CSV data."
        raise FloodDataError(msg)

    rows = list(csv.reader(io.StringIO(text)))
    readings: list[FloodReading] = []
    for row in rows[1:]:
        if len(row) < MIN_SHEET_COLUMNS:
            continue
        road_id = row[ID_COLUMN].strip()
        time = row[TIME_COLUMN].strip()
        if not road_id or not time:
            continue
        readings.append(
            FloodReading(road_id=road_id, time=time, level=parse_level(row[LEVEL_COLUMN])),
        )

    if not readings:
        msg = "Flood sheet is empty or malformed."
        raise FloodDataError(msg)

    LOGGER.debug("Parsed %d flood readings from CSV", len(readings))
    return readings


def parse_manual_input(text: str) -> list[FloodReading]:
    """Parse rows pasted from the spreadsheet, e.g. ``T1\\t23h00 07/12/2025\\t3``.

    Cells are split on tabs or runs of two or more spaces. The first cell is
    the road id, the last one the level, and anything between is the time.
    """
    readings: list[FloodReading] = []
    for line in text.splitlines():
        cells = [cell.strip() for cell in _MANUAL_SPLIT.split(line.strip()) if cell.strip()]
        if len(cells) < MIN_MANUAL_COLUMNS:
            continue
        road_id, level = cells[0], cells[-1]
        time = " ".join(cells[1:-1])
        readings.append(FloodReading(road_id=road_id, time=time, level=parse_level(level)))
    return readings


# endregion Parsing


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _in_range(value: int) -> bool:
    return FloodLevel.NORMAL <= value <= FloodLevel.SEVERE
