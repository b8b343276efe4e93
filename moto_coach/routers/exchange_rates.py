"""Exchange rates — always answers 200, falling back to static rates."""

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api", tags=["Payments"])


@router.get("/stripe-exchange-rates")
def exchange_rates(request: Request):
    return request.app.state.exchange_rates.get()
