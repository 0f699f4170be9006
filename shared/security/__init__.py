from .jwt_handler import (
    AuthenticatedUser,
    AuthGateway,
    ExpiredCredential,
    InvalidCredential,
    MalformedCredential,
    MissingCredential,
)
from .dependencies import get_auth_gateway, get_current_user
from .rate_limiter import build_limiter, checkout_rate_limit, user_id_or_ip

__all__ = [
    "AuthenticatedUser",
    "AuthGateway",
    "ExpiredCredential",
    "InvalidCredential",
    "MalformedCredential",
    "MissingCredential",
    "get_auth_gateway",
    "get_current_user",
    "build_limiter",
    "checkout_rate_limit",
    "user_id_or_ip",
]
