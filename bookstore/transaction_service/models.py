from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from bookstore.auth_service.models import User  # noqa: F401 (users table for the FK below)
from bookstore.catalog_service.models import Book
from shared.config.database import Base
from shared.models import IdMixin, utcnow


class Order(IdMixin, Base):
    """A completed checkout. Written once together with its items, never updated."""

    __tablename__ = "orders"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    total_price = Column(Numeric(12, 2), nullable=False)  # sum of item subtotals
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        order_by="OrderItem.line_no",
    )


class OrderItem(IdMixin, Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    line_no = Column(Integer, nullable=False)  # position in the submitted cart
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)  # price x quantity at purchase time

    order = relationship("Order", back_populates="items")
    book = relationship(Book, lazy="selectin")
