"""
Exception handlers.

Renders every error in the standard error envelope:
{"success": false, "error": {"message", "code", "details"?}}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.utils import APIException, error_response

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the API's exception handlers to an application."""

    @app.exception_handler(APIException)
    async def handle_api_exception(request: Request, exc: APIException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, code=exc.code, details=exc.details),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder(
                error_response("Invalid request", code="VALIDATION_ERROR", errors=errors)
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Routing errors (404, 405) raised by the framework itself
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(message, code="HTTP_ERROR"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error", code="INTERNAL_ERROR"),
        )
