import os

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from shared.config.settings import Settings
from shared.errors import Unauthenticated


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Extracts the user ID from the Authorization header if it verifies.
    Falls back to the client's IP address otherwise.
    """
    gateway = getattr(request.app.state, "auth_gateway", None)
    if gateway is not None:
        try:
            user = gateway.authenticate(request.headers.get("Authorization"))
        except Unauthenticated:
            pass
        else:
            return f"user:{user.id}"

    return f"ip:{get_remote_address(request)}"


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per app, so its switch and counters never leak across apps."""
    return Limiter(key_func=user_id_or_ip, enabled=settings.rate_limit_enabled)


def checkout_rate_limit() -> str:
    """Limit applied to checkout, read per request so deployments can tune it."""
    return os.getenv("CHECKOUT_RATE_LIMIT", "10/minute")
