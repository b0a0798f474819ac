"""Translation of bridge errors into HTTP responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from shared.exceptions import (
    ConfigError,
    EmbeddingBridgeError,
    EntityNotFoundError,
    InputError,
    ProviderCallError,
    ResponseShapeError,
    StoreError,
)

# most specific first, the first isinstance match wins
ERROR_STATUS_CODES: list[tuple[type[EmbeddingBridgeError], int]] = [
    (InputError, 400),
    (EntityNotFoundError, 404),
    (ConfigError, 503),
    (ProviderCallError, 502),
    (ResponseShapeError, 502),
    (StoreError, 503),
]


def get_status_code(exc: EmbeddingBridgeError) -> int:
    return next((code for error_type, code in ERROR_STATUS_CODES if isinstance(exc, error_type)), 500)


async def bridge_error_handler(request: Request, exc: EmbeddingBridgeError) -> JSONResponse:
    """Return {"error", "detail"} with the status code of the error type."""
    status_code = get_status_code(exc)
    if status_code >= 500:
        request.app.state.logging.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.__class__.__name__, "detail": str(exc)},
    )
