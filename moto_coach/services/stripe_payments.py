"""Stripe adapters — payment intents and Stripe Tax calculations.

The browser deals in major units ("19.99"); Stripe wants integer minor units
(1999). Conversions go through Decimal so 19.99 never becomes 1998.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import stripe

from moto_coach.config import STRIPE_SECRET_KEY
from moto_coach.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TAX_CODE = "txcd_99999999"  # General - Tangible Goods
PAYMENT_SOURCE = "moto_coach_track_reservation"


def to_minor_units(amount) -> int:
    """19.99 / "19.99" -> 1999, rounding half up."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int | None) -> float:
    return (amount or 0) / 100


def _configure() -> None:
    if not STRIPE_SECRET_KEY:
        raise ConfigurationError("Stripe secret key not configured")
    stripe.api_key = STRIPE_SECRET_KEY


def create_payment_intent(amount, currency: str = "aud", metadata: dict | None = None) -> dict:
    """Create a PaymentIntent for a major-unit amount."""
    _configure()
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency.lower(),
            metadata={"source": PAYMENT_SOURCE, **(metadata or {})},
            automatic_payment_methods={"enabled": True, "allow_redirects": "always"},
        )
    except stripe.StripeError as e:
        logger.error("Error creating payment intent: %s", e)
        raise UpstreamError("Payment setup failed", details=str(e)) from e

    return {
        "clientSecret": intent["client_secret"],
        "paymentIntentId": intent["id"],
    }


def _tax_line_item(item: dict) -> dict:
    return {
        "amount": to_minor_units(item.get("amount")),
        "reference": item.get("id") or item.get("reference") or "item",
        "tax_code": item.get("taxCode") or DEFAULT_TAX_CODE,
    }


def calculate_tax(line_items: list[dict], customer_details: dict, currency: str | None = None) -> dict:
    """Run a Stripe Tax calculation and return amounts in major units."""
    _configure()
    address = customer_details["address"]
    params = {
        "currency": currency or "usd",
        "line_items": [_tax_line_item(item) for item in line_items],
        "customer_details": {
            "address": {
                "line1": address.get("line1"),
                "city": address.get("city"),
                "state": address.get("state"),
                "postal_code": address.get("postal_code"),
                "country": address.get("country") or "US",
            },
            "address_source": "shipping",
        },
    }
    if customer_details.get("shippingCost"):
        params["shipping_cost"] = {"amount": to_minor_units(customer_details["shippingCost"])}

    try:
        calculation = stripe.tax.Calculation.create(**params)
    except stripe.StripeError as e:
        logger.error("Tax calculation error: %s", e)
        raise UpstreamError("Failed to calculate tax", details=str(e)) from e

    breakdown = []
    for entry in calculation.get("tax_breakdown") or []:
        rate_details = entry.get("tax_rate_details") or {}
        breakdown.append({
            "amount": from_minor_units(entry.get("amount")),
            "rate": rate_details.get("percentage_decimal"),
            "jurisdiction": rate_details.get("display_name"),
        })

    return {
        "taxAmount": from_minor_units(calculation["tax_amount_exclusive"]),
        "totalAmount": from_minor_units(calculation["amount_total"]),
        "currency": calculation["currency"].upper(),
        "taxBreakdown": breakdown,
    }
