"""Registration ledger — rider registrations kept in a Google Sheet.

Rows start at row 3: (timestamp, event name, event date "DD/MM/YYYY", rider
first/last name, bike number, bike size, date of birth, rider email, rider
phone, contact first/last name, contact email, contact phone). Counting reads
only the first three columns in one call; the sheet is small enough that no
pagination is needed.
"""

import json
import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from moto_coach.config import (
    DISPLAY_TIMEZONE,
    GOOGLE_CLIENT_EMAIL,
    GOOGLE_CLIENT_ID,
    GOOGLE_PRIVATE_KEY,
    GOOGLE_PRIVATE_KEY_ID,
    GOOGLE_PROJECT_ID,
    GOOGLE_SHEETS_CREDENTIALS,
    GOOGLE_SHEETS_ID,
    REGISTRATIONS_APPEND_RANGE,
    REGISTRATIONS_RANGE,
)
from moto_coach.errors import ConfigurationError
from moto_coach.services.google_calendar import format_display_date, parse_datetime

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
SHEETS_WRITE_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _credentials_info() -> dict:
    """Service-account info from the JSON blob, or from the split variables."""
    if GOOGLE_SHEETS_CREDENTIALS:
        try:
            return json.loads(GOOGLE_SHEETS_CREDENTIALS)
        except json.JSONDecodeError as e:
            raise ConfigurationError("GOOGLE_SHEETS_CREDENTIALS is not valid JSON") from e

    required = {
        "GOOGLE_PROJECT_ID": GOOGLE_PROJECT_ID,
        "GOOGLE_CLIENT_EMAIL": GOOGLE_CLIENT_EMAIL,
        "GOOGLE_PRIVATE_KEY": GOOGLE_PRIVATE_KEY,
        "GOOGLE_CLIENT_ID": GOOGLE_CLIENT_ID,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required environment variable: {missing[0]}")

    return {
        "type": "service_account",
        "project_id": GOOGLE_PROJECT_ID,
        "private_key_id": GOOGLE_PRIVATE_KEY_ID,
        "private_key": GOOGLE_PRIVATE_KEY.replace("\\n", "\n"),
        "client_email": GOOGLE_CLIENT_EMAIL,
        "client_id": GOOGLE_CLIENT_ID,
        "token_uri": "https://oauth2.googleapis.com/token",
    }


def get_sheets_service(scopes: list[str] = SHEETS_SCOPES):
    """Build a Sheets v4 service from the configured service account."""
    if not GOOGLE_SHEETS_ID:
        raise ConfigurationError("Google Sheets ID not configured")

    from google.oauth2 import service_account
    from googleapiclient.discovery import build

    credentials = service_account.Credentials.from_service_account_info(
        _credentials_info(), scopes=scopes,
    )
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


def read_rows(range_name: str = REGISTRATIONS_RANGE) -> list[list[str]]:
    """Read raw cell values for a sheet range."""
    service = get_sheets_service()
    result = service.spreadsheets().values().get(
        spreadsheetId=GOOGLE_SHEETS_ID, range=range_name,
    ).execute()
    return result.get("values", [])


def row_matches(row: list[str], event_name: str, event_date: str) -> bool:
    """Name matches trimmed and case-insensitively; date must match exactly."""
    row_name = row[1] if len(row) > 1 else ""
    row_date = row[2] if len(row) > 2 else ""
    return (
        row_name.strip().lower() == event_name.strip().lower()
        and row_date == event_date
    )


def count_matching(rows: list[list[str]], event_name: str, event_date: str) -> int:
    return sum(1 for row in rows if row_matches(row, event_name, event_date))


def count_registrations(event_name: str, event_date: str) -> int:
    """Number of ledger rows registered for an event on a DD/MM/YYYY date."""
    rows = read_rows()
    total = count_matching(rows, event_name, event_date)
    logger.info("Registration count for %r on %s: %d", event_name, event_date, total)
    return total


# ---------------------------------------------------------------------------
# Track reservations (writes)
# ---------------------------------------------------------------------------

RIDER_FIELDS = ("riderFirstName", "riderLastName", "bikeNumber", "bikeSize", "dateOfBirth",
                "riderEmail", "riderPhone")
CONTACT_FIELDS = ("contactFirstName", "contactLastName", "contactEmail", "contactPhone")


def _text(form: dict, key: str) -> str:
    value = form.get(key)
    return "" if value is None else str(value)


def normalize_event_date(value: str) -> str:
    """DD/MM/YYYY stays as is; ISO dates and timestamps are converted.

    Timestamps are converted in the display timezone. Anything unparseable
    is returned unchanged.
    """
    value = (value or "").strip()
    if not value or value.count("/") == 2:
        return value
    try:
        return date.fromisoformat(value).strftime("%d/%m/%Y")
    except ValueError:
        pass
    try:
        return format_display_date(parse_datetime(value))
    except ValueError:
        return value


def collect_riders(form: dict) -> list[dict]:
    """riderFirstName1, riderLastName1, ... until the first missing first name."""
    riders = []
    index = 1
    while form.get(f"riderFirstName{index}"):
        riders.append({field: _text(form, f"{field}{index}") for field in RIDER_FIELDS})
        index += 1
    return riders


def build_registration_rows(form: dict, now: datetime | None = None) -> list[list[str]]:
    """One ledger row per rider, each carrying the shared event and contact details.

    A form without riders still produces one row so the contact is recorded.
    """
    now = now or datetime.now(timezone.utc)
    timestamp = now.astimezone(ZoneInfo(DISPLAY_TIMEZONE)).strftime("%d/%m/%Y, %H:%M:%S")
    event = [timestamp, _text(form, "eventName").strip(), normalize_event_date(_text(form, "eventDate"))]
    contact = [_text(form, field) for field in CONTACT_FIELDS]

    riders = collect_riders(form)
    if not riders:
        # Rider email/phone arrive unnumbered when nobody is listed
        return [event + ["", "", "", "", "", _text(form, "riderEmail"), _text(form, "riderPhone")] + contact]
    return [event + [rider[field] for field in RIDER_FIELDS] + contact for rider in riders]


def append_registration(rows: list[list[str]], range_name: str = REGISTRATIONS_APPEND_RANGE) -> dict:
    """Append ledger rows as raw values; returns the Sheets API append response."""
    service = get_sheets_service(SHEETS_WRITE_SCOPES)
    result = service.spreadsheets().values().append(
        spreadsheetId=GOOGLE_SHEETS_ID,
        range=range_name,
        valueInputOption="RAW",
        body={"values": rows},
    ).execute()
    logger.info("Appended %d registration row(s) for %r on %s", len(rows), rows[0][1], rows[0][2])
    return result
