from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import get_current_user

from .schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    GenreCreate,
    GenreDetailResponse,
    GenreListResponse,
    GenreResponse,
    GenreUpdate,
    MessageResponse,
)
from .service import BookService, GenreService

genre_router = APIRouter(prefix="/genres", tags=["Genres"])
book_router = APIRouter(prefix="/books", tags=["Books"])

# Reads are public; writes require a bearer token
require_user = [Depends(get_current_user)]


# --- Genres ---

@genre_router.get("", response_model=GenreListResponse)
async def list_genres(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await GenreService.list_genres(db, page, limit)


@genre_router.get("/{genre_id}", response_model=GenreDetailResponse)
async def get_genre(genre_id: str, db: AsyncSession = Depends(get_db)):
    return await GenreService.get_genre_detail(db, genre_id)


@genre_router.post(
    "",
    response_model=GenreResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=require_user,
)
async def create_genre(payload: GenreCreate, db: AsyncSession = Depends(get_db)):
    return await GenreService.create_genre(db, payload)


@genre_router.patch("/{genre_id}", response_model=GenreResponse, dependencies=require_user)
async def update_genre(genre_id: str, payload: GenreUpdate, db: AsyncSession = Depends(get_db)):
    return await GenreService.update_genre(db, genre_id, payload)


@genre_router.delete("/{genre_id}", response_model=MessageResponse, dependencies=require_user)
async def delete_genre(genre_id: str, db: AsyncSession = Depends(get_db)):
    await GenreService.delete_genre(db, genre_id)
    return {"message": "Genre deleted successfully (soft deleted)."}


# --- Books ---

@book_router.get("", response_model=BookListResponse)
async def list_books(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    title: str | None = Query(default=None),
    genre_id: str | None = Query(default=None, alias="genreId"),
    db: AsyncSession = Depends(get_db),
):
    return await BookService.list_books(db, page, limit, title=title, genre_id=genre_id)


@book_router.get("/genre/{genre_id}", response_model=BookListResponse)
async def list_books_by_genre(
    genre_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await BookService.list_books(db, page, limit, genre_id=genre_id)


@book_router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: str, db: AsyncSession = Depends(get_db)):
    return await BookService.get_book(db, book_id)


@book_router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=require_user,
)
async def create_book(payload: BookCreate, db: AsyncSession = Depends(get_db)):
    return await BookService.create_book(db, payload)


@book_router.patch("/{book_id}", response_model=BookResponse, dependencies=require_user)
async def update_book(book_id: str, payload: BookUpdate, db: AsyncSession = Depends(get_db)):
    return await BookService.update_book(db, book_id, payload)


@book_router.delete("/{book_id}", response_model=MessageResponse, dependencies=require_user)
async def delete_book(book_id: str, db: AsyncSession = Depends(get_db)):
    await BookService.delete_book(db, book_id)
    return {"message": "Book deleted successfully (soft deleted). Purchase history retained."}
