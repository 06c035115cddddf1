"""Best-effort network date source.

Recurring schedules are processed against "today" from a time API so a wrong
local clock does not skew them. Any failure falls back to the local clock;
fetching never raises.
"""

import logging
from datetime import date, datetime
from typing import Any

import requests

logger = logging.getLogger(__name__)


def parse_time_response(payload: Any) -> date:
    """Extract the calendar date from a time API response.

    Accepts the "datetime" field (worldtimeapi.org) or "dateTime" field
    (timeapi.io).

    Raises:
        KeyError: If no datetime field is present.
        ValueError: If the payload is not an object or the datetime cannot be parsed.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected time response: {payload!r}")
    raw = payload.get("datetime") or payload.get("dateTime")
    if not raw:
        raise KeyError("datetime")
    return datetime.fromisoformat(str(raw).replace("Z", "+00:00")).date()


def fetch_remote_date(url: str, timeout: float) -> date:
    """Fetch the current date from a time API.

    Args:
        url: Time API endpoint returning JSON.
        timeout: Request timeout in seconds.

    Returns:
        Current calendar date according to the API.

    Raises:
        requests.RequestException: If API request fails.
        KeyError, ValueError: If the response cannot be understood.
    """
    response = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout)
    response.raise_for_status()
    return parse_time_response(response.json())


def fetch_today(url: str | None, timeout: float = 5.0) -> date:
    """Get today's date, preferring the network source.

    Args:
        url: Time API endpoint, or None to use the local clock directly.
        timeout: Request timeout in seconds.

    Returns:
        Today's date from the network, or from the local clock on any failure.
    """
    if not url:
        return date.today()
    try:
        return fetch_remote_date(url, timeout)
    except (requests.RequestException, KeyError, ValueError) as e:
        logger.debug("Time source %s unavailable, using local clock: %s", url, e)
        return date.today()
