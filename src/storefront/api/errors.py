"""Translate domain failures into the uniform ``{error, message, details}`` body."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.api.schemas import ErrorResponse
from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)


def _body(kind: str, message: str, details: dict | None = None) -> dict:
    return ErrorResponse(error=kind, message=message, details=details or {}).model_dump()


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=_body("ValidationError", "Invalid input", exc.messages))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content=_body("ValidationError", "Invalid input", details))


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_body("NotFound", str(exc) or "Not found"))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(status_code=500, content=_body("InternalError", "Something went wrong"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
