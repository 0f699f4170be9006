from typing import List

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import AuthenticatedUser, checkout_rate_limit, get_current_user

from .schemas import CheckoutRequest, OrderResponse, StatisticsResponse
from .service import CheckoutService, StatisticsService


def build_router(limiter: Limiter) -> APIRouter:
    """Transaction routes, with checkout throttled by the app's own limiter."""
    # Every transaction endpoint requires a verified caller
    router = APIRouter(prefix="/transactions", tags=["Transactions"])

    @router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
    @limiter.limit(checkout_rate_limit)
    async def create_transaction(
        request: Request,  # REQUIRED: slowapi needs this to check IP/Headers
        payload: CheckoutRequest,
        user: AuthenticatedUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await CheckoutService.checkout(db, user, payload.items)

    @router.get("", response_model=List[OrderResponse])
    async def list_transactions(
        user: AuthenticatedUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await CheckoutService.list_orders(db, user)

    # Declared before /{order_id} so "statistics" is not taken as an id
    @router.get("/statistics", response_model=StatisticsResponse)
    async def get_statistics(
        user: AuthenticatedUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await StatisticsService.get_statistics(db)

    @router.get("/{order_id}", response_model=OrderResponse)
    async def get_transaction(
        order_id: str,
        user: AuthenticatedUser = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ):
        return await CheckoutService.get_order(db, user, order_id)

    return router
