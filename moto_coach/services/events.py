"""Event resolver — matches a rider's selection against the coaching calendar.

An event is identified by its title and its start date as riders see it
(DD/MM/YYYY in the display timezone). Price and capacity live in the free-text
event description, e.g. ``rate=$250 spots: 12``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from moto_coach.errors import EventNotFound
from moto_coach.services import google_calendar, registrations
from moto_coach.services.google_calendar import CalendarEvent, format_display_date

logger = logging.getLogger(__name__)

DEFAULT_RATE = 190
DEFAULT_MAX_SPOTS = 10
LOOKUP_MAX_RESULTS = 250
LOOKAHEAD_MONTHS = 6

_RATE_RE = re.compile(r"rate\s*[=:]\s*\$?(\d+)", re.IGNORECASE | re.ASCII)
_PRICE_RE = re.compile(r"\$(\d+)", re.ASCII)
_SPOTS_RE = re.compile(r"spots\s*[=:]\s*(\d+)", re.IGNORECASE | re.ASCII)


@dataclass(frozen=True)
class EventTerms:
    rate: int = DEFAULT_RATE
    max_spots: int = DEFAULT_MAX_SPOTS


def parse_event_terms(description: str) -> EventTerms:
    """Extract rate and capacity from an event description, with defaults."""
    rate = DEFAULT_RATE
    rate_match = _RATE_RE.search(description) or _PRICE_RE.search(description)
    if rate_match:
        rate = int(rate_match.group(1))

    max_spots = DEFAULT_MAX_SPOTS
    spots_match = _SPOTS_RE.search(description)
    if spots_match:
        max_spots = int(spots_match.group(1))

    return EventTerms(rate=rate, max_spots=max_spots)


def remaining_spots(max_spots: int, registered: int) -> int:
    return max(0, max_spots - registered)


def find_event(items: Iterable[dict], event_name: str, event_date: str) -> Optional[CalendarEvent]:
    """First item whose trimmed title and display date equal the search values.

    Title comparison is case-sensitive and the date is compared as a string.
    """
    search_title = event_name.strip()
    search_date = event_date.strip()
    for item in items:
        event = CalendarEvent.from_item(item)
        if event is None:
            continue
        if event.title.strip() == search_title and format_display_date(event.start) == search_date:
            return event
    return None


def resolve_event(event_name: str, event_date: str, now: datetime | None = None) -> dict:
    """Look up an event and report its price, capacity and remaining seats.

    Raises ConfigurationError/UpstreamError when the calendar can't be read
    and EventNotFound when nothing matches. A failing registration lookup is
    not fatal: remaining seats are then reported as the full capacity.
    """
    now = now or datetime.now(timezone.utc)
    time_max = google_calendar.add_months(now, LOOKAHEAD_MONTHS)

    items = google_calendar.list_events(
        google_calendar.to_rfc3339(now),
        google_calendar.to_rfc3339(time_max),
        max_results=LOOKUP_MAX_RESULTS,
    )
    logger.info("Found %d calendar events", len(items))

    event = find_event(items, event_name, event_date)
    if event is None:
        for item in items:
            candidate = CalendarEvent.from_item(item)
            if candidate:
                logger.debug("  - %r on %s", candidate.title, format_display_date(candidate.start))
        raise EventNotFound(f"Event {event_name!r} on {event_date} not found")

    terms = parse_event_terms(event.description)
    date_string = format_display_date(event.start)

    spots_left = terms.max_spots
    try:
        registered = registrations.count_registrations(event_name, date_string)
        spots_left = remaining_spots(terms.max_spots, registered)
    except Exception as e:
        logger.error("Error getting registration count for %r: %s", event_name, e)

    return {
        "name": event.title,
        "date": date_string,
        "rate": terms.rate,
        "maxSpots": terms.max_spots,
        "remainingSpots": spots_left,
        "description": event.description,
    }
