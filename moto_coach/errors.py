"""Exception types and the JSON error envelope shared by every route."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

logger = logging.getLogger(__name__)


class MotoCoachError(Exception):
    """Base exception for the API."""


class ConfigurationError(MotoCoachError):
    """Raised when a credential or identifier for a collaborator is missing."""


class UpstreamError(MotoCoachError):
    """Raised when a collaborator returns an error or an unusable response."""

    def __init__(self, message: str, status: int = 500, details=None) -> None:
        super().__init__(message)
        self.status = status
        self.details = details


class EventNotFound(MotoCoachError):
    """Raised when no calendar entry matches the requested event."""


def allowed_methods(request: Request) -> list[str]:
    """Every method registered for the request path, across all routes."""
    methods = set()
    for route in request.app.router.routes:
        route_methods = getattr(route, "methods", None)
        if not route_methods:
            continue
        match, _ = route.matches(request.scope)
        if match != Match.NONE:
            methods.update(route_methods)
    return sorted(methods)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    headers = dict(getattr(exc, "headers", None) or {})
    # Starlette only reports the first route that matched the path
    if exc.status_code == 405:
        methods = allowed_methods(request)
        if methods:
            headers["Allow"] = ", ".join(methods)

    # Dict details are already shaped as {"error": ..., ...}
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code, headers=headers or None)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": "Invalid request", "details": jsonable_encoder(exc.errors())}, status_code=400)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
