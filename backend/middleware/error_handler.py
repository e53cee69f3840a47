"""
Exception handlers for the CISS Workforce API.

Maps the WorkforceException hierarchy to HTTP status codes and turns any
other unhandled exception into a JSON 500. Handlers (rather than a
middleware) keep the responses inside CORSMiddleware, so browsers still see
CORS headers on errors.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from exceptions import WorkforceException

logger = logging.getLogger(__name__)


async def workforce_exception_handler(request: Request, exc: WorkforceException) -> JSONResponse:
    """Render a typed error as {"error": {code, message, details}}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle any unhandled exception with a generic 500."""
    error_type = type(exc).__name__
    error_msg = str(exc) if str(exc) else "(no message)"

    logger.error(
        f"Unhandled exception in request {request.method} {request.url.path}: "
        f"{error_type}: {error_msg}"
    )

    # Internal messages are logged, not returned
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal",
                "message": "Internal server error",
                "details": {"error_type": error_type},
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Attach the handlers to an app.

    Usage:
        from middleware.error_handler import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(WorkforceException, workforce_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
