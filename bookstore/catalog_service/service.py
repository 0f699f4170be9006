import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import Conflict, InvalidRequest, NotFound

from .models import Book, Genre
from .repository import BookRepository, GenreRepository, active_books
from .schemas import (
    BookBrief,
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    GenreCreate,
    GenreDetailResponse,
    GenreListResponse,
    GenreResponse,
    GenreUpdate,
    Pagination,
)

logger = structlog.get_logger(__name__)


class GenreService:

    @staticmethod
    async def create_genre(db: AsyncSession, data: GenreCreate) -> Genre:
        genre = Genre(name=data.name)
        try:
            genre = await GenreRepository.save(db, genre)
        except IntegrityError as exc:
            await db.rollback()
            raise Conflict("Genre name already exists.") from exc
        logger.info("genre_created", genre_id=genre.id)
        return genre

    @staticmethod
    async def list_genres(db: AsyncSession, page: int, limit: int) -> GenreListResponse:
        genres, total = await GenreRepository.list_active(db, page, limit)
        return GenreListResponse(
            pagination=Pagination.build(total, page, limit),
            data=[GenreResponse.model_validate(g) for g in genres],
        )

    @staticmethod
    async def get_genre_detail(db: AsyncSession, genre_id: str) -> GenreDetailResponse:
        genre = await GenreRepository.get_active(db, genre_id)
        if not genre:
            raise NotFound("Genre not found.")

        result = await db.execute(
            active_books().where(Book.genre_id == genre_id).order_by(Book.title.asc())
        )
        books = result.scalars().all()
        return GenreDetailResponse(
            **GenreResponse.model_validate(genre).model_dump(),
            books=[BookBrief.model_validate(b) for b in books],
        )

    @staticmethod
    async def update_genre(db: AsyncSession, genre_id: str, data: GenreUpdate) -> Genre:
        genre = await GenreRepository.get_active(db, genre_id)
        if not genre:
            raise NotFound("Genre not found.")

        genre.name = data.name
        try:
            return await GenreRepository.save(db, genre)
        except IntegrityError as exc:
            await db.rollback()
            raise Conflict("Genre name already exists.") from exc

    @staticmethod
    async def delete_genre(db: AsyncSession, genre_id: str) -> None:
        genre = await GenreRepository.get_active(db, genre_id)
        if not genre:
            raise NotFound("Genre not found.")

        active_count = await GenreRepository.count_active_books(db, genre_id)
        if active_count > 0:
            raise InvalidRequest(
                f"Cannot delete genre. {active_count} active books are still associated with this genre."
            )

        genre.mark_deleted()
        await GenreRepository.save(db, genre)
        logger.info("genre_deleted", genre_id=genre_id)


class BookService:

    @staticmethod
    async def _require_genre(db: AsyncSession, genre_id: str) -> Genre:
        genre = await GenreRepository.get_active(db, genre_id)
        if not genre:
            raise NotFound("Genre not found.")
        return genre

    @staticmethod
    async def create_book(db: AsyncSession, data: BookCreate) -> Book:
        await BookService._require_genre(db, data.genre_id)

        book = Book(**data.model_dump())
        try:
            book = await BookRepository.save(db, book)
        except IntegrityError as exc:
            await db.rollback()
            raise Conflict("Book with this title already exists.") from exc
        logger.info("book_created", book_id=book.id)
        return book

    @staticmethod
    async def list_books(
        db: AsyncSession,
        page: int,
        limit: int,
        title: str | None = None,
        genre_id: str | None = None,
    ) -> BookListResponse:
        books, total = await BookRepository.list_active(db, page, limit, title=title, genre_id=genre_id)
        return BookListResponse(
            pagination=Pagination.build(total, page, limit),
            data=[BookResponse.model_validate(b) for b in books],
        )

    @staticmethod
    async def get_book(db: AsyncSession, book_id: str) -> Book:
        book = await BookRepository.get_active(db, book_id)
        if not book:
            raise NotFound("Book not found.")
        return book

    @staticmethod
    async def update_book(db: AsyncSession, book_id: str, data: BookUpdate) -> Book:
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if not changes:
            raise InvalidRequest("No update data provided.")

        book = await BookRepository.get_active(db, book_id)
        if not book:
            raise NotFound("Book not found.")

        if "genre_id" in changes:
            await BookService._require_genre(db, changes["genre_id"])

        for key, value in changes.items():
            setattr(book, key, value)
        try:
            return await BookRepository.save(db, book)
        except IntegrityError as exc:
            await db.rollback()
            raise Conflict("Book with this title already exists.") from exc

    @staticmethod
    async def delete_book(db: AsyncSession, book_id: str) -> None:
        book = await BookRepository.get_active(db, book_id)
        if not book:
            raise NotFound("Book not found.")

        book.mark_deleted()
        await BookRepository.save(db, book)
        logger.info("book_deleted", book_id=book_id)
