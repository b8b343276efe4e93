"""Diagnostics — registration sheet dump and date-format check.

Hidden unless DEBUG_ENDPOINTS_ENABLED is set; optionally restricted to
DEBUG_ALLOWED_IPS and a static X-API-Key.
"""

import hmac
import logging
from datetime import timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from moto_coach import config
from moto_coach.services import registrations
from moto_coach.services.google_calendar import format_display_date, parse_datetime

logger = logging.getLogger(__name__)

SAMPLE_START = "2025-09-11T03:30:00+10:00"
HEADER_RANGE = "Event Registrations!A1:C20"


def require_debug_access(request: Request, x_api_key: str = Header("")) -> None:
    if not config.DEBUG_ENDPOINTS_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")

    ip = request.client.host if request.client else "unknown"
    if config.DEBUG_ALLOWED_IPS and ip not in config.DEBUG_ALLOWED_IPS:
        logger.warning("Debug access denied for %s", ip)
        raise HTTPException(status_code=403, detail="Forbidden")

    if config.DEBUG_API_KEY and not hmac.compare_digest(x_api_key.encode(), config.DEBUG_API_KEY.encode()):
        raise HTTPException(status_code=401, detail="Invalid API key")


router = APIRouter(prefix="/api/debug", dependencies=[Depends(require_debug_access)])


def _number_rows(rows: list[list[str]], first_row: int) -> list[dict]:
    numbered = []
    for offset, row in enumerate(rows):
        cells = list(row) + [""] * (3 - len(row))
        numbered.append({
            "row_number": first_row + offset,
            "column_A": cells[0] or "empty",
            "column_B": cells[1] or "empty",
            "column_C": cells[2] or "empty",
        })
    return numbered


@router.get("/sheets")
def sheets_debug(
    eventName: str = Query("", description="Optional event name to count"),
    eventDate: str = Query("", description="Optional DD/MM/YYYY date to count"),
):
    try:
        header_rows = registrations.read_rows(HEADER_RANGE)
        ledger_rows = registrations.read_rows()
    except Exception as e:
        logger.error("Error accessing Google Sheets: %s", e)
        raise HTTPException(status_code=500, detail={
            "error": "Failed to access Google Sheets",
            "details": str(e),
        })

    body = {
        "success": True,
        "sheet_info": {
            "spreadsheet_id": config.GOOGLE_SHEETS_ID,
            "header_range_rows": len(header_rows),
            "production_range_rows": len(ledger_rows),
        },
        "header_data": _number_rows(header_rows, 1),
        "production_data": _number_rows(ledger_rows, 3),
    }
    if eventName and eventDate:
        body["search_test"] = {
            "looking_for_event": eventName,
            "looking_for_date": eventDate,
            "matches": registrations.count_matching(ledger_rows, eventName, eventDate),
        }
    return body


@router.get("/date")
async def date_debug(value: str = Query(SAMPLE_START, description="RFC 3339 timestamp")):
    try:
        start = parse_datetime(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unparseable timestamp: {value}")

    padded = format_display_date(start)
    day, month, year = padded.split("/")
    unpadded = f"{int(day)}/{int(month)}/{year}"
    return {
        "success": True,
        "formats": {
            "raw_date": value,
            "timezone": config.DISPLAY_TIMEZONE,
            "display_format": padded,
            "unpadded_format": unpadded,
            "utc": start.astimezone(timezone.utc).isoformat(),
        },
        "test_comparisons": {"padded_vs_unpadded": padded == unpadded},
    }
