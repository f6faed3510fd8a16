"""Exception handlers mapping domain errors onto HTTP responses.

Protean's handlers are registered first; the ones here pin the response
shape for validation (400) and not-found (404) errors, add the
ordering-specific conflicts (409), and finish with a catch-all that never
leaks internal details to the client.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import AlreadyCancelled, Forbidden, InsufficientStock, Unauthenticated

logger = structlog.get_logger(__name__)


async def _invalid_request(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": jsonable_encoder(exc.errors())})


async def _invalid(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"error": exc.messages})


async def _insufficient_stock(request: Request, exc: InsufficientStock):
    return JSONResponse(
        status_code=409,
        content={
            "error": exc.messages,
            "product_id": exc.product_id,
            "available": exc.available,
            "requested": exc.requested,
        },
    )


async def _already_cancelled(request: Request, exc: AlreadyCancelled):
    return JSONResponse(status_code=409, content={"error": exc.messages})


async def _forbidden(request: Request, exc: Forbidden):
    return JSONResponse(status_code=403, content={"error": str(exc)})


async def _unauthenticated(request: Request, exc: Unauthenticated):
    return JSONResponse(status_code=401, content={"error": str(exc)})


async def _internal_error(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(ValidationError, _invalid)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(InsufficientStock, _insufficient_stock)
    app.add_exception_handler(AlreadyCancelled, _already_cancelled)
    app.add_exception_handler(Forbidden, _forbidden)
    app.add_exception_handler(Unauthenticated, _unauthenticated)
    app.add_exception_handler(Exception, _internal_error)
