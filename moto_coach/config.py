"""Moto Coach API configuration — loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

REPO_ROOT = Path(__file__).resolve().parent.parent

# Stripe
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_PUBLISHABLE_KEY = os.environ.get("STRIPE_PUBLISHABLE_KEY", "")

# Google Calendar (public API key)
GOOGLE_CALENDAR_API_KEY = os.environ.get("GOOGLE_CALENDAR_API_KEY", "")
GOOGLE_CALENDAR_ID = os.environ.get("GOOGLE_CALENDAR_ID", "")

# Google Sheets (service account), registration ledger
GOOGLE_SHEETS_ID = os.environ.get("GOOGLE_SHEETS_ID", "")
GOOGLE_SHEETS_CREDENTIALS = os.environ.get("GOOGLE_SHEETS_CREDENTIALS", "")
REGISTRATIONS_RANGE = os.environ.get("REGISTRATIONS_RANGE", "Event Registrations!A3:C")
REGISTRATIONS_APPEND_RANGE = os.environ.get("REGISTRATIONS_APPEND_RANGE", "Event Registrations!A3:N")

# Split service-account variables, used when GOOGLE_SHEETS_CREDENTIALS is unset
GOOGLE_PROJECT_ID = os.environ.get("GOOGLE_PROJECT_ID", "")
GOOGLE_CLIENT_EMAIL = os.environ.get("GOOGLE_CLIENT_EMAIL", "")
GOOGLE_PRIVATE_KEY = os.environ.get("GOOGLE_PRIVATE_KEY", "")
GOOGLE_PRIVATE_KEY_ID = os.environ.get("GOOGLE_PRIVATE_KEY_ID", "")
GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "")

# Printful
PRINTFUL_API_KEY = os.environ.get("PRINTFUL_API_KEY", "")
PRINTFUL_STORE_ID = os.environ.get("PRINTFUL_STORE_ID", "").strip()

# Public (client-safe) config
RECAPTCHA_SITE_KEY = os.environ.get("RECAPTCHA_SITE_KEY", "")

# Debug endpoints
DEBUG_ENDPOINTS_ENABLED = os.environ.get("DEBUG_ENDPOINTS_ENABLED", "").lower() in ("1", "true", "yes")
DEBUG_ALLOWED_IPS = [ip.strip() for ip in os.environ.get("DEBUG_ALLOWED_IPS", "").split(",") if ip.strip()]
DEBUG_API_KEY = os.environ.get("DEBUG_API_KEY", "")

# CORS
DEFAULT_ALLOWED_ORIGINS = [
    "https://motocoach.com.au",
    "https://www.motocoach.com.au",
    "https://sydneymotocoach.com",
    "https://www.sydneymotocoach.com",
    "https://smg-mc.vercel.app",
]
ALLOWED_ORIGINS = DEFAULT_ALLOWED_ORIGINS + [
    o.strip() for o in os.environ.get("ALLOWED_ORIGINS", "").split(",") if o.strip()
]
PREVIEW_ORIGIN_REGEX = r"https://.*\.vercel\.app"

# Event dates are shown to riders (and written to the ledger) in this zone
DISPLAY_TIMEZONE = os.environ.get("DISPLAY_TIMEZONE", "Australia/Sydney")

# Outbound HTTP timeout in seconds
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "15"))

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
