"""
Application settings, read once from the environment.

Nothing here is a module-level singleton: ``Settings.from_env()`` builds a
value which ``create_app`` hands to the database layer and the Auth Gateway.
"""
import os
import secrets
import warnings
from dataclasses import dataclass

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _default_database_url() -> str:
    db_user = os.getenv("POSTGRES_USER", "postgres")
    db_password = os.getenv("POSTGRES_PASSWORD", "postgres")
    db_host = os.getenv("POSTGRES_HOST", "localhost")  # In Docker, this will be 'postgres'
    db_port = os.getenv("POSTGRES_PORT", "5432")
    db_name = os.getenv("POSTGRES_DB", "bookstore")
    return f"postgresql+asyncpg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    jwt_secret_key: str
    db_echo: bool = False
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 120
    jwt_issuer: str = "secure-app"
    jwt_audience: str = "secure-app-users"
    bcrypt_rounds: int = 12
    rate_limit_enabled: bool = True
    metrics_enabled: bool = True
    otlp_endpoint: str | None = None
    service_name: str = "bookstore_api"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        secret = os.getenv("JWT_SECRET_KEY", "")
        if not secret:
            # Tokens issued by this process stop verifying after a restart.
            warnings.warn(
                "JWT_SECRET_KEY is not set. Using a random per-process secret. "
                "Set this env var in production!",
                stacklevel=2,
            )
            secret = secrets.token_hex(32)

        return cls(
            database_url=os.getenv("DATABASE_URL") or _default_database_url(),
            jwt_secret_key=secret,
            db_echo=_env_bool("DB_ECHO", False),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "120")),
            jwt_issuer=os.getenv("JWT_ISSUER", "secure-app"),
            jwt_audience=os.getenv("JWT_AUDIENCE", "secure-app-users"),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", True),
            metrics_enabled=_env_bool("METRICS_ENABLED", True),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT") or None,
            service_name=os.getenv("SERVICE_NAME", "bookstore_api"),
        )
