"""Google Calendar client — reads the public coaching calendar with an API key.

Also owns the display-date convention: event dates are compared and stored
as DD/MM/YYYY strings in the display timezone, so anything that matches a
rider's selection against the calendar or the registration sheet goes
through ``format_display_date``.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

import requests

from moto_coach.config import (
    DISPLAY_TIMEZONE,
    GOOGLE_CALENDAR_API_KEY,
    GOOGLE_CALENDAR_ID,
    HTTP_TIMEOUT,
)
from moto_coach.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3/calendars"


@dataclass(frozen=True)
class CalendarEvent:
    title: str
    start: datetime
    description: str = ""

    @classmethod
    def from_item(cls, item: dict) -> Optional["CalendarEvent"]:
        """Build from a Calendar API item.

        All-day, untitled and unparseable items return None.
        """
        summary = item.get("summary")
        start_raw = (item.get("start") or {}).get("dateTime")
        if not summary or not start_raw:
            return None
        try:
            start = parse_datetime(start_raw)
        except (TypeError, ValueError):
            logger.warning("Skipping calendar item %r with bad start %r", summary, start_raw)
            return None
        return cls(title=summary, start=start, description=item.get("description") or "")


def parse_datetime(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_display_date(dt: datetime, tz_name: str = DISPLAY_TIMEZONE) -> str:
    """Format as zero-padded DD/MM/YYYY in the display timezone."""
    return dt.astimezone(ZoneInfo(tz_name)).strftime("%d/%m/%Y")


def add_months(dt: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day to the target month."""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def to_rfc3339(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def list_events(time_min: str, time_max: str, max_results: int = 50) -> list[dict]:
    """Fetch raw calendar items in [time_min, time_max], expanded and ordered by start."""
    if not GOOGLE_CALENDAR_API_KEY or not GOOGLE_CALENDAR_ID:
        logger.error("Missing Google Calendar configuration")
        raise ConfigurationError("Calendar configuration missing")

    url = f"{CALENDAR_API_BASE}/{quote(GOOGLE_CALENDAR_ID, safe='')}/events"
    params = {
        "key": GOOGLE_CALENDAR_API_KEY,
        "timeMin": time_min,
        "timeMax": time_max,
        "maxResults": max_results,
        "singleEvents": "true",
        "orderBy": "startTime",
    }

    try:
        resp = requests.get(url, params=params, timeout=HTTP_TIMEOUT)
    except requests.RequestException as e:
        logger.error("Google Calendar request failed: %s", e)
        raise UpstreamError("Calendar request failed", details=str(e)) from e

    if not resp.ok:
        logger.error("Google Calendar API error: %s %s", resp.status_code, resp.text)
        raise UpstreamError(
            f"Calendar API error: {resp.status_code}",
            status=resp.status_code,
            details=resp.text,
        )

    return resp.json().get("items") or []
