from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from bookstore.app import create_app
from bookstore.auth_service.models import User
from bookstore.catalog_service.models import Book, Genre
from shared.config.settings import Settings
from shared.security import AuthenticatedUser


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key="test-secret-key",
        bcrypt_rounds=4,
        rate_limit_enabled=False,
        metrics_enabled=False,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest_asyncio.fixture
async def app(settings):
    app = create_app(settings)
    await app.state.db.create_all()
    yield app
    await app.state.db.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def session_factory(app):
    return app.state.db.sessionmaker


@pytest.fixture
def make_genre(session_factory):
    async def _make_genre(name: str = "Fiction") -> str:
        async with session_factory() as session:
            genre = Genre(name=name)
            session.add(genre)
            await session.commit()
            return genre.id

    return _make_genre


@pytest.fixture
def make_book(session_factory, make_genre):
    async def _make_book(
        title: str,
        price: str = "10.00",
        stock: int = 5,
        writer: str = "Some Writer",
        genre_id: str | None = None,
    ) -> str:
        if genre_id is None:
            genre_id = await make_genre(f"Genre of {title}")
        async with session_factory() as session:
            book = Book(
                title=title,
                writer=writer,
                publisher="Pustaka",
                publication_year=2020,
                price=Decimal(price),
                stock_quantity=stock,
                genre_id=genre_id,
            )
            session.add(book)
            await session.commit()
            return book.id

    return _make_book


@pytest.fixture
def get_book(session_factory):
    async def _get_book(book_id: str) -> Book:
        async with session_factory() as session:
            return await session.get(Book, book_id)

    return _get_book


@pytest_asyncio.fixture
async def reader(session_factory) -> AuthenticatedUser:
    async with session_factory() as session:
        user = User(email="reader@example.com", username="reader", password="not-a-real-hash")
        session.add(user)
        await session.commit()
        return AuthenticatedUser(id=user.id, email=user.email, username=user.username)


@pytest.fixture
def auth_headers_for(app):
    def _headers(user: AuthenticatedUser) -> dict:
        token = app.state.auth_gateway.create_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def auth_headers(reader, auth_headers_for):
    return auth_headers_for(reader)
