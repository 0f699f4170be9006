"""
Checkout and order statistics.

Checkout validates the whole cart against a snapshot of the catalog, then
writes the order, its items and every stock decrement in one database
transaction. Each decrement is conditional on the stock still being there,
so a checkout that loses a race with another one rolls back entirely instead
of pushing stock_quantity below zero.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.auth_service.repository import UserRepository
from bookstore.catalog_service.models import Book
from bookstore.catalog_service.repository import BookRepository
from shared.errors import InsufficientStock, InvalidRequest, NotFound, TransactionFailed, Unauthenticated
from shared.observability import bookstore_checkout_duration_seconds, bookstore_checkout_total
from shared.security import AuthenticatedUser

from .models import Order, OrderItem
from .repository import TransactionRepository
from .schemas import CheckoutItem, StatisticsResponse, TopSellingBook

logger = structlog.get_logger(__name__)

TOP_SELLING_LIMIT = 5
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PlannedLine:
    book: Book
    quantity: int
    subtotal: Decimal


class StockConflict(Exception):
    """A conditional stock decrement matched no row."""

    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Stock changed during checkout for book {book_id}")


class CheckoutService:

    @staticmethod
    def _plan(items: Sequence[CheckoutItem], books: dict[str, Book]) -> tuple[list[PlannedLine], Decimal]:
        total_price = Decimal("0")
        lines: list[PlannedLine] = []
        for item in items:
            book = books[item.book_id]
            if item.quantity <= 0:
                raise InvalidRequest(f"Invalid item or quantity for book ID: {item.book_id}")
            if book.stock_quantity < item.quantity:
                raise InsufficientStock(book.title, book.stock_quantity)

            subtotal = Decimal(book.price) * item.quantity
            total_price += subtotal
            lines.append(PlannedLine(book=book, quantity=item.quantity, subtotal=subtotal))
        return lines, total_price

    @staticmethod
    async def checkout(
        db: AsyncSession,
        user: Optional[AuthenticatedUser],
        items: Sequence[CheckoutItem],
    ) -> Order:
        if user is None:
            raise Unauthenticated()

        log = logger.bind(user_id=user.id, item_count=len(items))
        with bookstore_checkout_duration_seconds.time():
            try:
                if not items:
                    raise InvalidRequest("Transaction must contain at least one item.")

                # A valid token can outlive its account
                if await UserRepository.get_by_id(db, user.id) is None:
                    raise Unauthenticated("User no longer exists.")

                # 1. One batch lookup over active books
                requested = [item.book_id for item in items]
                books = {b.id: b for b in await BookRepository.get_active_many(db, requested)}

                # 2. Every requested id must resolve, and a repeated id never does
                if len(books) != len(requested):
                    raise NotFound("One or more books were not found or deleted.")

                # 3. Price every line from the snapshot
                lines, total_price = CheckoutService._plan(items, books)
            except (Unauthenticated, InvalidRequest, NotFound, InsufficientStock) as exc:
                bookstore_checkout_total.labels(status="rejected").inc()
                log.info("checkout_rejected", reason=exc.message)
                raise
            except SQLAlchemyError as exc:
                bookstore_checkout_total.labels(status="failed").inc()
                log.error("checkout_failed", error=str(exc))
                raise TransactionFailed() from exc

            # 4. Order, items and stock decrements commit or roll back together
            order = Order(
                user_id=user.id,
                total_price=total_price,
                items=[
                    OrderItem(
                        book_id=line.book.id,
                        line_no=line_no,
                        quantity=line.quantity,
                        subtotal=line.subtotal,
                    )
                    for line_no, line in enumerate(lines)
                ],
            )
            try:
                await TransactionRepository.add_order(db, order)
                # Book id order, so concurrent carts lock rows in the same order
                for line in sorted(lines, key=lambda line: line.book.id):
                    if not await BookRepository.decrement_stock(db, line.book.id, line.quantity):
                        raise StockConflict(line.book.id)
                await db.commit()
            except (StockConflict, SQLAlchemyError) as exc:
                await db.rollback()
                bookstore_checkout_total.labels(status="failed").inc()
                log.error("checkout_failed", error=str(exc))
                raise TransactionFailed() from exc

        bookstore_checkout_total.labels(status="success").inc()
        log.info("checkout_completed", order_id=order.id, total_price=str(total_price))

        # 5. Re-read the persisted order with its items and books
        return await TransactionRepository.get_order(db, order.id)

    @staticmethod
    async def list_orders(db: AsyncSession, user: AuthenticatedUser) -> list[Order]:
        return await TransactionRepository.list_orders_for_user(db, user.id)

    @staticmethod
    async def get_order(db: AsyncSession, user: AuthenticatedUser, order_id: str) -> Order:
        order = await TransactionRepository.get_order(db, order_id, user_id=user.id)
        if not order:
            raise NotFound("Transaction not found or unauthorized.")
        return order


class StatisticsService:

    @staticmethod
    async def get_statistics(db: AsyncSession) -> StatisticsResponse:
        total_orders = await TransactionRepository.count_orders(db)
        revenue = await TransactionRepository.total_revenue(db)
        top = await TransactionRepository.top_selling_books(db, limit=TOP_SELLING_LIMIT)

        return StatisticsResponse(
            totalOrders=total_orders,
            totalRevenue=str(revenue.quantize(CENTS, rounding=ROUND_HALF_UP)),
            topSellingBooks=[TopSellingBook(**row) for row in top],
        )
