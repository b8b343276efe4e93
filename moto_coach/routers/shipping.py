"""Shipping — Printful shipping rates and draft-order quotes for the shop."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, HTTPException

from moto_coach.errors import ConfigurationError, UpstreamError
from moto_coach.services import printful

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Shop"])


@router.post("/printful-shipping-rates")
def shipping_rates(body: Optional[dict] = Body(None)):
    body = body or {}
    error = printful.validate_shipping_request(body)
    if error:
        raise HTTPException(status_code=400, detail=error)

    try:
        result = printful.get_shipping_rates(
            body["recipient"],
            body["items"],
            currency=body.get("currency") or "USD",
            locale=body.get("locale") or "en_US",
        )
    except ConfigurationError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except UpstreamError as e:
        raise HTTPException(status_code=500, detail={"error": str(e), "details": e.details})

    return {"success": True, **result}


@router.post("/printful-quote")
def order_quote(body: Optional[dict] = Body(None)):
    error = printful.validate_order_payload(body)
    if error:
        raise HTTPException(status_code=400, detail=error)

    try:
        result = printful.quote_order(body)
    except ConfigurationError as e:
        logger.error("%s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except UpstreamError as e:
        logger.error("Error generating Printful quote: %s", e)
        status = e.status if 400 <= e.status < 600 else 500
        raise HTTPException(status_code=status, detail={
            "error": "Failed to generate Printful quote",
            "details": e.details if e.details is not None else str(e),
        })

    return {"success": True, **result}
