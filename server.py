#!/usr/bin/env python3
"""Moto Coach API server.

Launch: python3 server.py
Serves at http://0.0.0.0:8000 (or PORT env var)
"""

import uvicorn

from moto_coach import config


def main():
    print("=" * 60)
    print("  Moto Coach — API")
    print("=" * 60)

    # Warn about collaborators that will answer 500 until configured
    missing = [
        name for name in (
            "STRIPE_SECRET_KEY", "STRIPE_PUBLISHABLE_KEY",
            "GOOGLE_CALENDAR_API_KEY", "GOOGLE_CALENDAR_ID",
            "GOOGLE_SHEETS_ID", "PRINTFUL_API_KEY",
        )
        if not getattr(config, name)
    ]
    if missing:
        print("\n  WARNING: not set: " + ", ".join(missing))
        print("  Routes that need them will return 500. Continuing anyway...\n")

    if config.DEBUG_ENDPOINTS_ENABLED:
        print("  Debug endpoints ENABLED at /api/debug/*")

    url = f"http://{config.HOST}:{config.PORT}"
    print(f"\n  API docs: {url}/api/docs")
    print("  Press Ctrl+C to stop\n")

    from moto_coach.app import create_app
    app = create_app()
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level="info")


if __name__ == "__main__":
    main()
