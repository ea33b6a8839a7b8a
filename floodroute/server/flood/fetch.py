"""Fetch the latest flood readings from the published Google Sheet."""

from __future__ import annotations

import logging
import random
import time

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from floodroute.server import config
from floodroute.server.flood.levels import (
    FloodDataError,
    FloodSnapshot,
    parse_flood_csv,
)

LOGGER = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


def _get_session_with_retries(retries: int = config.FETCH_RETRIES) -> requests.Session:
    """Create a session that retries GETs on 5xx responses."""
    session = requests.Session()
    retry_strategy = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def fetch_flood_snapshot(
    url: str = config.SHEET_URL,
    session: requests.Session | None = None,
    timeout: float = config.FETCH_TIMEOUT,
) -> FloodSnapshot:
    """Download and parse the sheet into a fresh snapshot.

    A cache-busting query string is appended so proxies and the sheet
    frontend never serve a stale export.

    Raises
    ------
    FloodDataError
        On network failure, a non-2xx response, or an unusable body.

    """
    if session is None:
        with _get_session_with_retries() as owned:
            return fetch_flood_snapshot(url, session=owned, timeout=timeout)

    params = {"t": int(time.time() * 1000), "r": random.random()}  # noqa: S311

    try:
        response = session.get(url, params=params, headers=NO_CACHE_HEADERS, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        LOGGER.warning("Flood sheet fetch failed: %s", exc)
        msg = f"Unable to fetch flood levels: {exc}"
        raise FloodDataError(msg) from exc

    readings = parse_flood_csv(response.text)
    LOGGER.info("Fetched %d flood readings", len(readings))
    return FloodSnapshot.from_readings(readings)
