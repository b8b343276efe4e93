"""Payments — Stripe payment intents, tax calculation, publishable key."""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Body, HTTPException

from moto_coach.config import STRIPE_PUBLISHABLE_KEY
from moto_coach.errors import ConfigurationError, UpstreamError
from moto_coach.services import stripe_payments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Payments"])


def _positive_number(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0


@router.post("/calculate-tax")
def calculate_tax(body: Optional[dict] = Body(None)):
    body = body or {}
    line_items = body.get("lineItems")
    customer_details = body.get("customerDetails")

    if not isinstance(line_items, list) or not line_items:
        raise HTTPException(status_code=400, detail="Line items are required")
    if not all(isinstance(item, dict) for item in line_items):
        raise HTTPException(status_code=400, detail="Each line item must be an object with an amount")
    if not isinstance(customer_details, dict) or not isinstance(customer_details.get("address"), dict):
        raise HTTPException(status_code=400, detail="Customer address is required")

    try:
        result = stripe_payments.calculate_tax(line_items, customer_details, body.get("currency"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        logger.error("Tax calculation unavailable: %s", e)
        raise HTTPException(status_code=500, detail={"error": "Failed to calculate tax", "details": str(e)})
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail={"error": str(e), "details": e.details})

    return {"success": True, **result}


@router.post("/create-payment-intent")
def create_payment_intent(body: Optional[dict] = Body(None)):
    body = body or {}
    amount = body.get("amount")
    if not _positive_number(amount):
        raise HTTPException(status_code=400, detail={
            "error": "Invalid amount",
            "details": "Amount must be a positive number",
        })

    currency = body.get("currency") or "aud"
    metadata = body.get("metadata") or {}
    if not isinstance(currency, str) or not isinstance(metadata, dict):
        raise HTTPException(status_code=400, detail="currency must be a string and metadata an object")

    try:
        result = stripe_payments.create_payment_intent(amount, currency, metadata)
    except ConfigurationError as e:
        logger.error("Payment intent unavailable: %s", e)
        raise HTTPException(status_code=500, detail={"error": "Payment setup failed", "details": str(e)})
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail={"error": str(e), "details": e.details})

    return {"success": True, **result}


@router.get("/stripe-config")
async def stripe_config():
    if not STRIPE_PUBLISHABLE_KEY:
        logger.error("STRIPE_PUBLISHABLE_KEY not configured")
        raise HTTPException(status_code=500, detail="Configuration error")
    return {"publishableKey": STRIPE_PUBLISHABLE_KEY}
