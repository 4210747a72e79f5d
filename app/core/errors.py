# app/core/errors.py
from __future__ import annotations
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import logging
logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for errors that map to a client-facing HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationFailed(CatalogError):
    """Malformed or out-of-range input; raised before any storage work."""

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_body(self) -> Dict[str, Any]:
        return {"errors": [{"field": self.field, "message": self.message}]}


class NotFound(CatalogError):
    status_code = 404


class Conflict(CatalogError):
    # duplicate names/emails, category still referenced by products
    status_code = 400


class Unauthorized(CatalogError):
    status_code = 401


class Forbidden(CatalogError):
    status_code = 403


def _field_of(loc: List[Any]) -> Optional[str]:
    # ("query", "minPrice") -> "minPrice"; ("body", "name") -> "name"
    parts = [str(p) for p in loc if p not in ("query", "body", "path", "header", "cookie")]
    return ".".join(parts) or None


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected status=%s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render FastAPI/pydantic validation failures with the same 400 envelope
    as ValidationFailed, naming the offending field.
    """
    errors = [
        {"field": _field_of(list(err.get("loc", ()))), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    logger.info("%s %s rejected status=400 errors=%s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content=jsonable_encoder({"errors": errors}))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
