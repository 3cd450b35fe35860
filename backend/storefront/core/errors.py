"""
Domain exceptions and their HTTP mapping.

Services raise these; the handler registered in `register_exception_handlers`
turns them into JSON responses so routers never build error payloads by hand.
"""
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from storefront.core.logging import get_logger

logger = get_logger(__name__)


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def extra(self) -> dict[str, Any]:
        """Additional fields merged into the error response body."""
        return {}


class ValidationError(StorefrontError):
    """Malformed or missing input that passed schema validation."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StorefrontError):
    """Referenced order, product or promo code does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: Any = None) -> None:
        self.resource = resource
        self.identifier = identifier
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} {identifier} not found"
        super().__init__(msg)


class UnauthorizedError(StorefrontError):
    """Missing or invalid bearer credential."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ForbiddenError(StorefrontError):
    """Authenticated, but the role or ownership check failed."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class InvalidTransitionError(StorefrontError):
    """An order state machine guard was violated."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, current: str, attempted: str, reason: str) -> None:
        self.current = current
        self.attempted = attempted
        self.reason = reason
        super().__init__(f"Cannot move from '{current}' to '{attempted}': {reason}")

    def extra(self) -> dict[str, Any]:
        return {"current": self.current, "attempted": self.attempted}


class ConflictError(StorefrontError):
    """Concurrent modification detected; retry with fresh state."""

    status_code = status.HTTP_409_CONFLICT


class UpstreamFailure(StorefrontError):
    """Persistence or another collaborator is unavailable."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PromoCodeRejected(StorefrontError):
    """A promo code failed one of the evaluator checks."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        if reason == "CodeNotFound":
            self.status_code = status.HTTP_404_NOT_FOUND
        super().__init__(message)

    def extra(self) -> dict[str, Any]:
        return {"reason": self.reason}


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to JSON responses."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "Request failed",
        error_type=type(exc).__name__,
        error=exc.message,
        path=request.url.path,
        status_code=exc.status_code,
    )

    headers: Optional[dict[str, str]] = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "errorType": type(exc).__name__, **exc.extra()},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)  # type: ignore[arg-type]
