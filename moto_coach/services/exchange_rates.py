"""Exchange rates — AUD-based conversion factors from Stripe, cached for an hour.

The cache is a plain object owned by the application (see app.create_app),
so tests can build one with a fake quote source and a fake clock.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import stripe

from moto_coach.config import STRIPE_SECRET_KEY

logger = logging.getLogger(__name__)

BASE_CURRENCY = "AUD"
QUOTE_CURRENCIES = ("USD", "NZD", "EUR", "GBP")
MIN_RESOLVED = 5  # base + every quote currency
CACHE_TTL_SECONDS = 60 * 60

FALLBACK_RATES = {
    "AUD": 1.0,
    "USD": 0.65,
    "NZD": 1.08,
    "EUR": 0.60,
    "GBP": 0.51,
}

# (base, quote) -> units of quote per one unit of base
QuoteSource = Callable[[str, str], float]


def stripe_quote(base: str, quote: str) -> float:
    """Fetch one conversion factor from Stripe's exchange-rate API."""
    if not STRIPE_SECRET_KEY:
        raise RuntimeError("Stripe secret key not configured")
    stripe.api_key = STRIPE_SECRET_KEY
    # One request per quote currency; a failure counts against that currency only
    result =stripe.ExchangeRate.retrieve(base.lower())
    return float(result["rates"][quote.lower()])


@dataclass
class RateSnapshot:
    rates: dict[str, float]
    fetched_at: float
    fallback: bool = False


class ExchangeRateCache:
    """One-entry, time-based cache of the supported currency table.

    Concurrent refreshes are not coordinated; the last writer wins and every
    writer stores an equivalent table for the same window.
    """

    def __init__(
        self,
        source: QuoteSource = stripe_quote,
        clock: Callable[[], float] = time.time,
        ttl: float = CACHE_TTL_SECONDS,
    ) -> None:
        self._source = source
        self._clock = clock
        self._ttl = ttl
        self._snapshot: Optional[RateSnapshot] = None

    def _fresh(self, now: float) -> bool:
        return self._snapshot is not None and now - self._snapshot.fetched_at < self._ttl

    def fetch_rates(self) -> tuple[dict[str, float], bool]:
        """Query each currency; returns (rates, fallback_used)."""
        rates = {BASE_CURRENCY: 1.0}
        for code in QUOTE_CURRENCIES:
            try:
                value = self._source(BASE_CURRENCY, code)
            except Exception as e:
                logger.warning("Exchange rate for %s unavailable: %s", code, e)
                continue
            if not value or value <= 0:
                logger.warning("Ignoring non-positive exchange rate for %s: %r", code, value)
                continue
            rates[code] = value

        if len(rates) < MIN_RESOLVED:
            logger.error(
                "Only %d of %d currencies resolved, using fallback rates",
                len(rates), len(QUOTE_CURRENCIES) + 1,
            )
            return dict(FALLBACK_RATES), True
        return rates, False

    def get(self) -> dict:
        """Return {rates, cached, timestamp[, fallback]}; never raises."""
        now = self._clock()
        if self._fresh(now):
            logger.debug("Returning cached exchange rates")
            snapshot = self._snapshot
            cached = True
        else:
            logger.info("Fetching fresh exchange rates")
            rates, fallback = self.fetch_rates()
            snapshot = RateSnapshot(rates=rates, fetched_at=now, fallback=fallback)
            self._snapshot = snapshot
            cached = False

        body = {
            "rates": dict(snapshot.rates),
            "cached": cached,
            "timestamp": int(snapshot.fetched_at * 1000),
        }
        if snapshot.fallback:
            body["fallback"] = True
        return body

    def clear(self) -> None:
        self._snapshot = None
