"""Printful client — shipping-rate quotes and draft-order cost quotes."""

from __future__ import annotations

import logging
import time
from urllib.parse import quote

import requests

from moto_coach.config import HTTP_TIMEOUT, PRINTFUL_API_KEY, PRINTFUL_STORE_ID
from moto_coach.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

PRINTFUL_API_BASE = "https://api.printful.com"
PRINTFUL_ORDERS_ENDPOINT = f"{PRINTFUL_API_BASE}/v2/orders"

REQUIRED_RECIPIENT_FIELDS = ("address1", "city", "country_code", "zip")
POLL_INTERVAL_SECONDS = 1.5
POLL_TIMEOUT_SECONDS = 45.0

_CHEAPEST_FIELDS = (
    "id", "name", "rate", "currency",
    "minDeliveryDays", "maxDeliveryDays", "minDeliveryDate", "maxDeliveryDate",
)


# ---------------------------------------------------------------------------
# Validation (runs before any outbound call)
# ---------------------------------------------------------------------------

def validate_shipping_request(body: dict) -> str | None:
    """Return an error message for an invalid rate request, else None."""
    recipient = body.get("recipient")
    if not isinstance(recipient, dict) or not all(recipient.get(f) for f in REQUIRED_RECIPIENT_FIELDS):
        return "Missing required recipient address fields"

    items = body.get("items")
    if not isinstance(items, list) or not items:
        return "Missing or invalid items array"

    for item in items:
        if not isinstance(item, dict) or not item.get("variant_id") or not item.get("quantity"):
            return "Each item must have variant_id and quantity"
    return None


def validate_order_payload(payload) -> str | None:
    if not isinstance(payload, dict) or not payload:
        return "Missing order payload"
    if not isinstance(payload.get("recipient"), dict):
        return "Missing recipient information"
    items = payload.get("items") if isinstance(payload.get("items"), list) else payload.get("order_items")
    if not isinstance(items, list) or not items:
        return "Order must include at least one item"
    return None


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------

def _headers() -> dict:
    if not PRINTFUL_API_KEY:
        raise ConfigurationError("Printful API key not configured")
    headers = {
        "Authorization": f"Bearer {PRINTFUL_API_KEY}",
        "Content-Type": "application/json",
    }
    if PRINTFUL_STORE_ID:
        headers["X-PF-Store-Id"] = PRINTFUL_STORE_ID
    return headers


def _json_or_none(resp: requests.Response):
    try:
        return resp.json()
    except ValueError:
        return None


def call_printful(method: str, url: str, body: dict | None = None, params: dict | None = None,
                  default_message: str = "Printful API request failed"):
    """Send one request; non-2xx raises UpstreamError carrying the parsed body."""
    try:
        resp = requests.request(
            method, url, headers=_headers(), json=body, params=params, timeout=HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Printful %s %s failed: %s", method, url, e)
        raise UpstreamError("Printful API request failed", details=str(e)) from e

    data = _json_or_none(resp)
    if not resp.ok:
        message = ((data or {}).get("error") or {}).get("message") if isinstance(data, dict) else None
        raise UpstreamError(
            message or default_message,
            status=resp.status_code,
            details=data,
        )
    return data


# ---------------------------------------------------------------------------
# Shipping rates
# ---------------------------------------------------------------------------

def cheapest_option(options: list[dict]) -> dict:
    """Lowest float(rate); the earliest option wins a tie."""
    best = options[0]
    for option in options[1:]:
        if float(option["rate"]) < float(best["rate"]):
            best = option
    return {field: best.get(field) for field in _CHEAPEST_FIELDS}


def get_shipping_rates(recipient: dict, items: list[dict], currency: str = "USD", locale: str = "en_US") -> dict:
    """Quote shipping for a cart. Caller validates with validate_shipping_request first."""
    logger.info(
        "Fetching shipping rates from Printful: %s, %s %s (%d items)",
        recipient.get("city"), recipient.get("country_code"), recipient.get("zip"), len(items),
    )
    data = call_printful(
        "POST",
        f"{PRINTFUL_API_BASE}/shipping/rates",
        body={"recipient": recipient, "items": items, "currency": currency, "locale": locale},
        default_message="Failed to fetch shipping rates from Printful",
    )

    options = (data or {}).get("result")
    if not isinstance(options, list) or not options:
        logger.error("Unexpected Printful response format: %s", data)
        raise UpstreamError("Unexpected response format from Printful", details=data)

    try:
        cheapest = cheapest_option(options)
    except (KeyError, TypeError, ValueError) as e:
        logger.error("Unreadable Printful shipping rate: %s", e)
        raise UpstreamError("Unexpected response format from Printful", details=data) from e
    logger.info("Shipping rates calculated: %d options, cheapest %s (%s)",
                len(options), cheapest["rate"], cheapest["name"])
    return {"shippingOptions": options, "cheapestOption": cheapest}


# ---------------------------------------------------------------------------
# Draft-order quotes
# ---------------------------------------------------------------------------

def extract_order(response) -> dict | None:
    """Unwrap the order object from the shapes Printful responds with."""
    if not isinstance(response, dict):
        return None
    result = response.get("result")
    if isinstance(result, dict) and isinstance(result.get("order"), dict):
        return result["order"]
    if isinstance(result, dict):
        return result
    if isinstance(response.get("data"), dict):
        return response["data"]
    return response


def extract_order_id(response):
    order = extract_order(response)
    if not order:
        return None
    return order.get("id") or order.get("order_id")


def _calculation_status(block) -> str | None:
    if not isinstance(block, dict):
        return None
    status = block.get("calculation_status") or block.get("status")
    return status.lower() if isinstance(status, str) else None


def wait_for_order_costs(order_id, interval: float = POLL_INTERVAL_SECONDS,
                         timeout: float = POLL_TIMEOUT_SECONDS, sleep=time.sleep,
                         clock=time.monotonic) -> dict:
    """Poll a draft order until Printful has priced it."""
    url = f"{PRINTFUL_ORDERS_ENDPOINT}/{quote(str(order_id), safe='')}"
    started = clock()
    while clock() - started < timeout:
        response = call_printful("GET", url)
        order = extract_order(response) or {}
        cost_status = _calculation_status(order.get("costs")) or "unknown"
        retail_status = _calculation_status(order.get("retail_costs")) or cost_status

        if "failed" in (cost_status, retail_status):
            raise UpstreamError("Printful cost calculation failed", status=502, details=response)
        if cost_status == "calculated" and retail_status == "calculated":
            return order
        sleep(interval)

    raise UpstreamError("Timed out waiting for Printful cost calculations", status=504)


def delete_draft_order(order_id) -> None:
    try:
        call_printful("DELETE", f"{PRINTFUL_ORDERS_ENDPOINT}/{quote(str(order_id), safe='')}")
    except UpstreamError as e:
        logger.warning("Printful quote: failed to delete draft %s: %s", order_id, e)


def quote_order(payload: dict, **poll_kwargs) -> dict:
    """Price an order by creating, polling and deleting a Printful draft."""
    payload = dict(payload)
    if not isinstance(payload.get("items"), list):
        payload["items"] = payload.pop("order_items")

    created = call_printful("POST", PRINTFUL_ORDERS_ENDPOINT, body=payload, params={"confirm": "false"})
    order_id = extract_order_id(created)
    if not order_id:
        raise UpstreamError("Unable to determine Printful order ID from response", status=502, details=created)

    try:
        order = wait_for_order_costs(order_id, **poll_kwargs)
    finally:
        delete_draft_order(order_id)

    retail = order.get("retail_costs") or {}
    costs = order.get("costs") or {}
    return {
        "costs": order.get("costs"),
        "retail_costs": order.get("retail_costs"),
        "shipping": order.get("shipping"),
        "currency": retail.get("currency") or costs.get("currency"),
        "quote": order,
    }
