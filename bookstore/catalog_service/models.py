from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from shared.config.database import Base
from shared.models import IdMixin, SoftDeleteMixin, TimestampMixin


class Genre(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "genres"

    name = Column(String(100), unique=True, nullable=False)


class Book(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_books_price_positive"),
        CheckConstraint("stock_quantity >= 0", name="ck_books_stock_non_negative"),
    )

    title = Column(String(255), unique=True, nullable=False)
    writer = Column(String(255), nullable=False)
    publisher = Column(String(255), nullable=False)
    publication_year = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    genre_id = Column(String(36), ForeignKey("genres.id"), nullable=False, index=True)

    genre = relationship("Genre", lazy="selectin")
