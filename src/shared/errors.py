"""Errors shared across bounded contexts and their HTTP mapping.

Domain validation and lookup failures use protean's own exceptions
(``ValidationError``, ``ObjectNotFoundError``). The two failures below come
from outside the domain model: the payment processor and the persistence
layer.
"""

from enum import Enum

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class GatewayErrorKind(Enum):
    DECLINED = "declined"
    AMBIGUOUS = "ambiguous"
    UNAVAILABLE = "unavailable"


class GatewayError(Exception):
    """The payment processor refused, could not be reached, or gave no clear answer.

    ``AMBIGUOUS`` means the charge may or may not have happened (timeout,
    dropped connection, processor 5xx while confirming). Callers must not
    assume either outcome.
    """

    def __init__(self, kind: GatewayErrorKind, reason: str = "") -> None:
        self.kind = kind
        self.reason = reason
        super().__init__(f"{kind.value}: {reason}" if reason else kind.value)


class PersistenceError(Exception):
    """The order store failed to write a record."""


_GATEWAY_STATUS = {
    GatewayErrorKind.DECLINED: 402,
    GatewayErrorKind.UNAVAILABLE: 502,
    GatewayErrorKind.AMBIGUOUS: 504,
}


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain and infrastructure errors into JSON responses."""

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.messages})

    @app.exception_handler(InvalidOperationError)
    async def _invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ObjectNotFoundError)
    async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(PermissionError)
    async def _forbidden(request: Request, exc: PermissionError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"error": str(exc)})

    @app.exception_handler(GatewayError)
    async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        logger.warning("gateway_error", kind=exc.kind.value, reason=exc.reason, path=request.url.path)
        return JSONResponse(
            status_code=_GATEWAY_STATUS[exc.kind],
            content={"error": exc.reason or exc.kind.value, "kind": exc.kind.value},
        )

    @app.exception_handler(PersistenceError)
    async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error("persistence_error", error=str(exc), path=request.url.path)
        return JSONResponse(status_code=503, content={"error": str(exc)})
