from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from .jwt_handler import AuthenticatedUser, AuthGateway

# Raw header so a missing header and a malformed one fail differently
bearer_header = APIKeyHeader(name="Authorization", scheme_name="BearerToken", auto_error=False)


def get_auth_gateway(request: Request) -> AuthGateway:
    return request.app.state.auth_gateway


async def get_current_user(
    request: Request,
    authorization: str | None = Depends(bearer_header),
    gateway: AuthGateway = Depends(get_auth_gateway),
) -> AuthenticatedUser:
    """Dependency to validate the bearer JWT and return the caller's identity."""
    user = gateway.authenticate(authorization)

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user.id
    return user
