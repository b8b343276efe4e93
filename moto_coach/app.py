"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moto_coach.config import ALLOWED_ORIGINS, PREVIEW_ORIGIN_REGEX
from moto_coach.errors import install_error_handlers
from moto_coach.routers import (
    bookings, calendar, debug, events, exchange_rates, payments, shipping, site_config,
)
from moto_coach.services.exchange_rates import ExchangeRateCache


def create_app(rate_cache: ExchangeRateCache | None = None) -> FastAPI:
    app = FastAPI(
        title="Moto Coach API",
        description=(
            "Booking, payment and shop endpoints for the Moto Coach website. "
            "Each route wraps one upstream service (Stripe, Google Calendar, "
            "Google Sheets, Printful)."
        ),
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )

    app.state.exchange_rates = rate_cache or ExchangeRateCache()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_origin_regex=PREVIEW_ORIGIN_REGEX,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-API-Key"],
    )
    install_error_handlers(app)

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    for r in [payments, exchange_rates, calendar, events, bookings, shipping, site_config]:
        app.include_router(r.router)

    # Diagnostics, hidden from API docs
    app.include_router(debug.router, include_in_schema=False)

    return app
