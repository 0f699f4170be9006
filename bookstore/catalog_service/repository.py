"""Catalog Store: async access to genres and books.

Every read builds on ``active_genres()`` / ``active_books()`` so soft-deleted
rows never leak into catalog listings or checkout.
"""
from typing import Iterable, Optional

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Book, Genre


def active_genres() -> Select:
    return select(Genre).where(Genre.active())


def active_books() -> Select:
    return select(Book).where(Book.active())


async def _paginate(db: AsyncSession, stmt: Select, page: int, limit: int) -> tuple[list, int]:
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    result = await db.execute(stmt.offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


class GenreRepository:

    @staticmethod
    async def save(db: AsyncSession, genre: Genre) -> Genre:
        db.add(genre)
        await db.commit()
        await db.refresh(genre)
        return genre

    @staticmethod
    async def get_active(db: AsyncSession, genre_id: str) -> Optional[Genre]:
        result = await db.execute(active_genres().where(Genre.id == genre_id))
        return result.scalars().first()

    @staticmethod
    async def list_active(db: AsyncSession, page: int, limit: int) -> tuple[list[Genre], int]:
        return await _paginate(db, active_genres().order_by(Genre.name.asc()), page, limit)

    @staticmethod
    async def count_active_books(db: AsyncSession, genre_id: str) -> int:
        stmt = select(func.count()).select_from(Book).where(Book.active(), Book.genre_id == genre_id)
        return (await db.execute(stmt)).scalar() or 0


class BookRepository:

    @staticmethod
    async def save(db: AsyncSession, book: Book) -> Book:
        db.add(book)
        await db.commit()
        return await BookRepository.get(db, book.id)

    @staticmethod
    async def get(db: AsyncSession, book_id: str) -> Optional[Book]:
        """Fetch regardless of soft-delete status (order history, post-write re-reads)."""
        result = await db.execute(
            select(Book).where(Book.id == book_id).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_active(db: AsyncSession, book_id: str) -> Optional[Book]:
        result = await db.execute(active_books().where(Book.id == book_id))
        return result.scalars().first()

    @staticmethod
    async def get_active_many(db: AsyncSession, book_ids: Iterable[str]) -> list[Book]:
        """One batch lookup for a set of ids, skipping soft-deleted books."""
        result = await db.execute(
            active_books()
            .where(Book.id.in_(list(book_ids)))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_active(
        db: AsyncSession,
        page: int,
        limit: int,
        title: Optional[str] = None,
        genre_id: Optional[str] = None,
    ) -> tuple[list[Book], int]:
        stmt = active_books()
        if title:
            stmt = stmt.where(Book.title.ilike(f"%{title}%"))
        if genre_id:
            stmt = stmt.where(Book.genre_id == genre_id)
        stmt = stmt.order_by(Book.created_at.desc(), Book.id.asc())
        return await _paginate(db, stmt, page, limit)

    @staticmethod
    async def decrement_stock(db: AsyncSession, book_id: str, quantity: int) -> bool:
        """
        Conditional atomic decrement. Matches only an active book that still
        has ``quantity`` in stock, so concurrent checkouts cannot drive
        stock_quantity below zero. Does not commit.
        """
        stmt = (
            update(Book)
            .where(
                Book.id == book_id,
                Book.active(),
                Book.stock_quantity >= quantity,
            )
            .values(stock_quantity=Book.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1
