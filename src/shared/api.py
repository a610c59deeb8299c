"""HTTP error mapping for the typed error kinds."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from shared.errors import (
    ConflictError,
    IneligibleError,
    InsufficientResourceError,
    NotFoundError,
    StateError,
)

_STATUS_CODES = {
    NotFoundError: 404,
    ConflictError: 409,
    StateError: 409,
    IneligibleError: 422,
    InsufficientResourceError: 422,
}


def _make_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: ARG001
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handler


def register_error_handlers(app: FastAPI) -> None:
    """Register Protean's handlers plus the more specific typed-error handlers.

    Starlette resolves handlers along the exception's MRO, so the typed kinds
    win over the generic ``ValidationError`` -> 400 mapping.
    """
    register_exception_handlers(app)
    for exc_class, status_code in _STATUS_CODES.items():
        app.add_exception_handler(exc_class, _make_handler(status_code))
