"""
Configuration for the flood routing service.
Loads from a .env file if available, otherwise uses defaults.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]

load_dotenv(dotenv_path=PROJECT_ROOT / ".env")

# Topology assets
ASSETS_DIR = Path(os.getenv("FLOODROUTE_ASSETS_DIR", str(PROJECT_ROOT / "assets")))
JUNCTIONS_FILE = Path(
    os.getenv("FLOODROUTE_JUNCTIONS_FILE", str(ASSETS_DIR / "junctions.json")),
)
ROAD_LENGTHS_FILE = Path(
    os.getenv("FLOODROUTE_ROAD_LENGTHS_FILE", str(ASSETS_DIR / "road_lengths.json")),
)

# Flood level sheet (published-to-web CSV export)
SHEET_ID = (
    "2PACX-1vQ892VqyedgkSO8ISOeIUlFSe6PscQgqZuR3iMjWjdv0dbOjmwFinpzL3FLaleWAIVf-"
    "wl8CmWJpitd"
)
SHEET_URL = os.getenv(
    "FLOODROUTE_SHEET_URL",
    f"https://docs.google.com/spreadsheets/d/e/{SHEET_ID}/pub?output=csv",
)
FETCH_TIMEOUT = float(os.getenv("FLOODROUTE_FETCH_TIMEOUT", "10"))  # seconds
FETCH_RETRIES = int(os.getenv("FLOODROUTE_FETCH_RETRIES", "2"))
REFRESH_SECONDS = float(os.getenv("FLOODROUTE_REFRESH_SECONDS", "5"))

# Planning pipeline verbosity: none | info | debug
LOGGING_MODE = os.getenv("FLOODROUTE_LOGGING_MODE", "none")
