"""Bookings — track-day reservations written to the registration ledger."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException

from moto_coach.errors import ConfigurationError
from moto_coach.services import registrations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bookings"])


@router.post("/track-reserve")
def track_reserve(body: Optional[dict] = Body(None)):
    body = body or {}
    if not body.get("eventName") or not body.get("eventDate"):
        raise HTTPException(status_code=400, detail="eventName and eventDate are required")

    rows = registrations.build_registration_rows(body)
    try:
        result = registrations.append_registration(rows)
    except ConfigurationError as e:
        logger.error("Registration ledger not configured: %s", e)
        raise HTTPException(status_code=500, detail={
            "error": "Google Sheets configuration error",
            "details": str(e),
        })
    except Exception as e:
        logger.error("Error submitting to Google Sheets: %s", e)
        raise HTTPException(status_code=500, detail={
            "error": "Failed to submit registration",
            "details": str(e),
        })

    return {
        "success": True,
        "message": "Registration submitted successfully",
        "rowsAdded": len(rows),
        "sheetResponse": result,
    }
