"""
Core package containing configuration, database, security, errors and logging.
"""
from storefront.core.config import settings
from storefront.core.database import Base, get_db_session
from storefront.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    PromoCodeRejected,
    StorefrontError,
    UnauthorizedError,
    UpstreamFailure,
    ValidationError,
)
from storefront.core.logging import configure_logging, get_logger
from storefront.core.security import (
    AdminUser,
    AuthenticatedUser,
    CurrentUser,
    create_access_token,
    decode_access_token,
)

__all__ = [
    "settings",
    "Base",
    "get_db_session",
    "configure_logging",
    "get_logger",
    "StorefrontError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "InvalidTransitionError",
    "ConflictError",
    "UpstreamFailure",
    "PromoCodeRejected",
    "CurrentUser",
    "AuthenticatedUser",
    "AdminUser",
    "create_access_token",
    "decode_access_token",
]
