"""Event validation — confirms a bookable event and reports remaining seats."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from moto_coach.errors import ConfigurationError, EventNotFound, UpstreamError
from moto_coach.services.events import resolve_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Events"])


@router.get("/validate-event")
def validate_event(
    eventName: Optional[str] = Query(None, description="Event title as shown on the calendar"),
    eventDate: Optional[str] = Query(None, description="Event date, DD/MM/YYYY"),
):
    if not eventName or not eventDate:
        raise HTTPException(status_code=400, detail={
            "success": False,
            "error": "eventName and eventDate parameters are required",
        })

    logger.info("Validating event: %r on %r", eventName, eventDate)
    try:
        event = resolve_event(eventName, eventDate)
    except EventNotFound:
        raise HTTPException(status_code=404, detail={"success": False, "error": "Event not found in calendar"})
    except ConfigurationError:
        raise HTTPException(status_code=500, detail={"success": False, "error": "Calendar configuration missing"})
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail={"success": False, "error": str(e)})

    logger.info("Event validated: %s", event["name"])
    return {"success": True, "event": event}
