from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    totalItems: int
    totalPages: int
    currentPage: int
    itemsPerPage: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(
            totalItems=total,
            totalPages=(total + limit - 1) // limit,
            currentPage=page,
            itemsPerPage=limit,
        )


# --- Genres ---

class GenreCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class GenreUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class GenreResponse(BaseModel):
    id: str
    name: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# --- Books ---

class BookCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    writer: str = Field(min_length=1, max_length=255)
    publisher: str = Field(min_length=1, max_length=255)
    publication_year: int
    description: Optional[str] = None
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(ge=0)
    genre_id: str


class BookUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    writer: Optional[str] = Field(default=None, min_length=1, max_length=255)
    publisher: Optional[str] = Field(default=None, min_length=1, max_length=255)
    publication_year: Optional[int] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    genre_id: Optional[str] = None


class BookBrief(BaseModel):
    id: str
    title: str
    writer: str
    price: Decimal
    stock_quantity: int

    class Config:
        from_attributes = True


class BookResponse(BaseModel):
    id: str
    title: str
    writer: str
    publisher: str
    publication_year: int
    description: Optional[str]
    price: Decimal
    stock_quantity: int
    genre_id: str
    genre: Optional[GenreResponse] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GenreDetailResponse(GenreResponse):
    books: List[BookBrief] = []


class GenreListResponse(BaseModel):
    pagination: Pagination
    data: List[GenreResponse]


class BookListResponse(BaseModel):
    pagination: Pagination
    data: List[BookResponse]


class MessageResponse(BaseModel):
    message: str
