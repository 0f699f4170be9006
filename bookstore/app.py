from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import Database
from shared.config.settings import Settings
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import AuthGateway, build_limiter

from .auth_service.router import router as auth_router
from .auth_service.service import AuthService, build_password_context
from .catalog_service.router import book_router, genre_router
from .transaction_service.router import build_router as build_transaction_router

logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Assemble the bookstore API around one explicit Settings value."""
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Bookstore API",
        version="1.0.0",
        description="Users, book catalog and checkout transactions.",
    )

    # --- SHARED COLLABORATORS ---
    gateway = AuthGateway(settings)
    app.state.settings = settings
    app.state.db = Database(settings)
    app.state.auth_gateway = gateway
    app.state.auth_service = AuthService(build_password_context(settings), gateway)

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, settings)

    # --- ERRORS & SECURITY ---
    register_exception_handlers(app)
    limiter = build_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(auth_router)
    app.include_router(genre_router)
    app.include_router(book_router)
    app.include_router(build_transaction_router(limiter))

    @app.get("/", include_in_schema=False)
    async def welcome():
        return {
            "message": "Welcome to the Book Store API!",
            "date": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "bookstore", "status": "running"}

    @app.on_event("startup")
    async def startup_event():
        await app.state.db.create_all()
        logger.info("startup_complete", service=settings.service_name)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.db.dispose()
        logger.info("database_disconnected")

    return app
