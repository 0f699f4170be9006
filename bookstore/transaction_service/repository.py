"""Order Store: persistence and aggregation over orders and order items."""
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.catalog_service.models import Book

from .models import Order, OrderItem


class TransactionRepository:

    @staticmethod
    async def add_order(db: AsyncSession, order: Order) -> Order:
        """Stage an order and its items inside the caller's transaction. Does not commit."""
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str, user_id: Optional[str] = None) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await db.execute(stmt.execution_options(populate_existing=True))
        return result.scalars().first()

    @staticmethod
    async def list_orders_for_user(db: AsyncSession, user_id: str) -> list[Order]:
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_orders(db: AsyncSession) -> int:
        return (await db.execute(select(func.count()).select_from(Order))).scalar() or 0

    @staticmethod
    async def total_revenue(db: AsyncSession) -> Decimal:
        total = (await db.execute(select(func.sum(Order.total_price)))).scalar()
        if total is None:
            return Decimal("0")
        return total if isinstance(total, Decimal) else Decimal(str(total))

    @staticmethod
    async def top_selling_books(db: AsyncSession, limit: int = 5) -> list[dict]:
        """Books by units sold, descending; ties go to the lower book id."""
        sold = func.sum(OrderItem.quantity).label("quantity")
        stmt = (
            select(OrderItem.book_id, sold, Book.title, Book.writer)
            .join(Book, Book.id == OrderItem.book_id)
            .group_by(OrderItem.book_id, Book.title, Book.writer)
            .order_by(sold.desc(), OrderItem.book_id.asc())
            .limit(limit)
        )
        result = await db.execute(stmt)
        return [
            {
                "book_id": row.book_id,
                "quantity": int(row.quantity),
                "book_title": row.title,
                "writer": row.writer,
            }
            for row in result.all()
        ]
