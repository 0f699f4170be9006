import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from shared.config.settings import Settings
from shared.errors import Unauthenticated


class MissingCredential(Unauthenticated):
    default_message = "Authorization header missing."


class MalformedCredential(Unauthenticated):
    default_message = "Bearer token missing or malformed."


class ExpiredCredential(Unauthenticated):
    default_message = "Token has expired."


class InvalidCredential(Unauthenticated):
    default_message = "Invalid token."


@dataclass(frozen=True)
class AuthenticatedUser:
    """A caller identity proven by a verified bearer token."""

    id: str
    email: str
    username: str


class AuthGateway:
    """Issues and verifies JWT access tokens with an explicitly supplied secret."""

    def __init__(self, settings: Settings):
        self._secret_key = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._expire_minutes = settings.access_token_expire_minutes
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience

    def create_access_token(self, user: AuthenticatedUser, expires_delta: timedelta | None = None) -> str:
        """Creates a JWT access token with a UTC expiration."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=self._expire_minutes)
        to_encode = {
            "sub": user.id,
            "id": user.id,
            "email": user.email,
            "username": user.username,
            "exp": datetime.now(timezone.utc) + expires_delta,
            "iss": self._issuer,
            "aud": self._audience,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> dict:
        """Decodes and verifies the JWT. Raises a typed Unauthenticated failure."""
        if token.count(".") != 2:
            raise MalformedCredential()
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
            )
        except ExpiredSignatureError as exc:
            raise ExpiredCredential() from exc
        except JWTError as exc:
            raise InvalidCredential() from exc

    def authenticate(self, authorization: str | None) -> AuthenticatedUser:
        """Turn a raw ``Authorization`` header value into a verified identity."""
        if not authorization:
            raise MissingCredential()

        # Format: "Bearer <token>"
        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            raise MalformedCredential()

        payload = self.verify_access_token(token)
        user_id, email, username = payload.get("id"), payload.get("email"), payload.get("username")
        if not user_id or not email or not username:
            raise MalformedCredential("Invalid token structure.")
        return AuthenticatedUser(id=str(user_id), email=email, username=username)
