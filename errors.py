"""
Application exceptions and the handlers that turn them into JSON responses

Stores and dependencies raise these; nothing below the route layer builds
HTTP responses itself.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        return {"msg": self.message}


class ValidationFailed(AppError):
    """Malformed input or rejected credentials (400, express-validator style body)"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: List[Dict[str, Any]]):
        super().__init__(errors[0]["msg"] if errors else "Invalid request")
        self.errors = errors

    def to_body(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Unauthorized(AppError):
    """Authenticated, but not the owner of the resource"""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


def _validation_entry(error: Dict[str, Any]) -> Dict[str, Any]:
    loc = [str(part) for part in error.get("loc", ())]
    # Custom validators raise ValueError("..."); surface that message as-is
    ctx_error = (error.get("ctx") or {}).get("error")
    msg = str(ctx_error) if isinstance(ctx_error, ValueError) else error.get("msg", "Invalid value")
    return {
        "msg": msg,
        "param": ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else ""),
        "location": loc[0] if loc else "body",
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"[ERRORS] {request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [_validation_entry(error) for error in exc.errors()]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"msg": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"[ERRORS] Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"msg": "Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
