"""Public configuration that is safe to expose to the browser."""

from fastapi import APIRouter

from moto_coach.config import RECAPTCHA_SITE_KEY

router = APIRouter(prefix="/api", tags=["Config"])


@router.get("/config")
async def public_config():
    return {"recaptchaSiteKey": RECAPTCHA_SITE_KEY or None}
