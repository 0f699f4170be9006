from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .settings import Settings

Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    if settings.database_url.startswith("sqlite"):
        # One shared connection, otherwise every checkout sees an empty in-memory DB
        return create_async_engine(
            settings.database_url,
            echo=settings.db_echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(settings.database_url, echo=settings.db_echo, pool_pre_ping=True)


class Database:
    """Engine plus session factory for one application instance."""

    def __init__(self, settings: Settings):
        self.engine = build_engine(settings)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_all(self) -> None:
        # IMPORTANT: models must be imported so they register with Base
        from bookstore.auth_service import models as auth_models  # noqa: F401
        from bookstore.catalog_service import models as catalog_models  # noqa: F401
        from bookstore.transaction_service import models as transaction_models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.db.sessionmaker() as session:
        yield session
