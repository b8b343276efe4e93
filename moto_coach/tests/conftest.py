"""Shared fixtures for Moto Coach API tests.

Provides:
- fake_sheets: patches the Sheets service with an in-memory fake (reads and appends)
- fake_calendar: patches the Calendar HTTP call with a canned response
- client: FastAPI TestClient with a deterministic exchange-rate cache
- sample data factories for calendar items and ledger rows
"""

import os
from unittest.mock import patch

import pytest

# Set env vars before any moto_coach imports
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_fake")
os.environ.setdefault("STRIPE_PUBLISHABLE_KEY", "pk_test_fake")
os.environ.setdefault("GOOGLE_CALENDAR_API_KEY", "fake-calendar-key")
os.environ.setdefault("GOOGLE_CALENDAR_ID", "coach@group.calendar.google.com")
os.environ.setdefault("GOOGLE_SHEETS_ID", "fake-sheet-id")
os.environ.setdefault("GOOGLE_SHEETS_CREDENTIALS", '{"type": "service_account"}')
os.environ.setdefault("PRINTFUL_API_KEY", "fake-printful-key")
os.environ.setdefault("DISPLAY_TIMEZONE", "Australia/Sydney")


# ---------------------------------------------------------------------------
# In-memory fake Google Sheets
# ---------------------------------------------------------------------------

class FakeRequest:
    def __init__(self, result=None, error=None):
        self._result = result
        self._error = error

    def execute(self):
        if self._error:
            raise self._error
        return self._result


class FakeValues:
    """Mimics service.spreadsheets().values()."""

    def __init__(self, sheet):
        self._sheet = sheet

    def get(self, spreadsheetId, range):
        self._sheet.calls.append({"spreadsheetId": spreadsheetId, "range": range})
        if self._sheet.error:
            return FakeRequest(error=self._sheet.error)
        values = self._sheet.ranges.get(range, self._sheet.rows)
        result = {"range": range, "majorDimension": "ROWS"}
        if values:
            result["values"] = values
        return FakeRequest(result)

    def append(self, spreadsheetId, range, valueInputOption, body):
        self._sheet.appends.append({
            "spreadsheetId": spreadsheetId,
            "range": range,
            "valueInputOption": valueInputOption,
            "values": body["values"],
        })
        if self._sheet.error:
            return FakeRequest(error=self._sheet.error)
        self._sheet.rows.extend(body["values"])
        return FakeRequest({
            "spreadsheetId": spreadsheetId,
            "updates": {"updatedRange": range, "updatedRows": len(body["values"])},
        })


class FakeSpreadsheets:
    def __init__(self, sheet):
        self._sheet = sheet

    def values(self):
        return FakeValues(self._sheet)


class FakeSheetsService:
    """Stand-in for googleapiclient's Sheets v4 resource.

    ``rows`` answers every range unless ``ranges`` has an entry for it.
    Appended rows land in ``rows``. Setting ``error`` makes every call raise.
    """

    def __init__(self):
        self.rows = []
        self.ranges = {}
        self.calls = []
        self.appends = []
        self.error = None

    def spreadsheets(self):
        return FakeSpreadsheets(self)


@pytest.fixture
def fake_sheets():
    service = FakeSheetsService()
    with patch("moto_coach.services.registrations.get_sheets_service", return_value=service):
        yield service


# ---------------------------------------------------------------------------
# Fake Google Calendar HTTP
# ---------------------------------------------------------------------------

class FakeResponse:
    """Minimal requests.Response replacement."""

    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeCalendar:
    def __init__(self):
        self.items = []
        self.status_code = 200
        self.text = ""

    def respond(self, url, params=None, timeout=None):
        if self.status_code >= 300:
            return FakeResponse(self.status_code, text=self.text)
        return FakeResponse(200, {"kind": "calendar#events", "items": self.items})


@pytest.fixture
def fake_calendar():
    calendar = FakeCalendar()
    with patch("moto_coach.services.google_calendar.requests.get", side_effect=calendar.respond) as mock_get:
        calendar.mock = mock_get
        yield calendar


# ---------------------------------------------------------------------------
# App client
# ---------------------------------------------------------------------------

FIXED_RATES = {"USD": 0.66, "NZD": 1.09, "EUR": 0.61, "GBP": 0.52}


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_cache(clock):
    from moto_coach.services.exchange_rates import ExchangeRateCache
    return ExchangeRateCache(source=lambda base, quote: FIXED_RATES[quote], clock=clock)


@pytest.fixture
def client(rate_cache):
    """Sync test client for the FastAPI app."""
    from fastapi.testclient import TestClient
    from moto_coach.app import create_app

    app = create_app(rate_cache=rate_cache)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def served_client(rate_cache):
    """Test client that returns 500 responses instead of re-raising, as a live server would."""
    from fastapi.testclient import TestClient
    from moto_coach.app import create_app

    app = create_app(rate_cache=rate_cache)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------

def make_calendar_item(**overrides):
    defaults = {
        "kind": "calendar#event",
        "id": "evt-clubmx-20250911",
        "status": "confirmed",
        "summary": "ClubMX",
        "description": "Coaching day at ClubMX. rate=$190 spots=10",
        "start": {"dateTime": "2025-09-11T03:30:00+10:00", "timeZone": "Australia/Sydney"},
        "end": {"dateTime": "2025-09-11T07:30:00+10:00", "timeZone": "Australia/Sydney"},
    }
    defaults.update(overrides)
    return defaults


def make_registration_row(event_name="ClubMX", event_date="11/09/2025", timestamp="01/09/2025 10:15:00"):
    return [timestamp, event_name, event_date]


@pytest.fixture
def calendar_item():
    return make_calendar_item


@pytest.fixture
def registration_row():
    return make_registration_row
