"""Error taxonomy shared by every router.

Each error is an ``HTTPException`` with a fixed status code, so controllers
raise them wherever they would raise ``HTTPException``. ``register_error_handlers``
installs the one mapping from exceptions to the ``{"message": ...}`` envelope.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = logging.getLogger(__name__)


class AppError(HTTPException):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    # clients of the original API expect 400 for taken slots and duplicates
    status_code = 400


class ServerError(AppError):
    status_code = 500


def _describe_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    if location:
        return f"{location}: {error.get('msg')}"
    return str(error.get("msg"))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": [_describe_validation_error(e) for e in errors]},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error", "error": str(exc)})


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
