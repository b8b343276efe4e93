"""Calendar — raw upcoming events for the booking page + registration counts."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException, Query

from moto_coach.errors import ConfigurationError, UpstreamError
from moto_coach.services import google_calendar, registrations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Calendar"])


@router.get("/calendar")
def list_calendar_events(
    timeMin: Optional[str] = Query(None, description="RFC 3339 lower bound"),
    timeMax: Optional[str] = Query(None, description="RFC 3339 upper bound"),
    maxResults: int = Query(50, ge=1, le=2500),
):
    if not timeMin or not timeMax:
        raise HTTPException(status_code=400, detail="timeMin and timeMax parameters are required")

    try:
        items = google_calendar.list_events(timeMin, timeMax, max_results=maxResults)
    except ConfigurationError:
        raise HTTPException(status_code=500, detail={"error": "Server configuration error", "fallback": True})
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail={"error": str(e), "fallback": True})

    return {"success": True, "events": items, "total": len(items)}


@router.post("/calendar")
def registration_count(body: Optional[dict] = Body(None)):
    body = body or {}
    event_name = body.get("eventName")
    event_date = body.get("eventDate")
    if not event_name or not event_date:
        raise HTTPException(status_code=400, detail="eventName and eventDate are required")

    try:
        count = registrations.count_registrations(str(event_name), str(event_date))
    except Exception as e:
        logger.error("Error getting registration count: %s", e)
        raise HTTPException(status_code=500, detail={
            "error": "Failed to get registration count",
            "registrationCount": 0,
        })

    return {"success": True, "registrationCount": count}
