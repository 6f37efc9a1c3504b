import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.api.dependencies import get_cancellation_probe, get_current_identity
from app.core.config import settings
from app.core.database import get_async_session
from app.schemas.auth.identity_schema import Identity
from app.schemas.orders.order_schema import (
    Order, OrderHistoryRequest, OrderHistoryResponse, Payment, PaymentsResponse, PendingOrdersResponse
)
from app.services.common.read_snapshot import CancellationProbe
from app.services.orders.order_service import OrderAggregationService
from app.services.orders.payment_service import PaymentService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/pending", response_model=PendingOrdersResponse)
async def get_pending_orders(
    app: Optional[str] = Query(None, description="WR_RECEPTION, WR_DELIVERY or WR_WAITER"),
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity),
    is_cancelled: CancellationProbe = Depends(get_cancellation_probe)
):
    """Open orders of the caller's merchant with the active delivery sessions"""
    service = OrderAggregationService(db, is_cancelled=is_cancelled)
    return await service.get_pending(identity.merchant_id, app or settings.DEFAULT_APP_CHANNEL)


@router.post("/history", response_model=OrderHistoryResponse)
async def get_order_history(
    history: OrderHistoryRequest,
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity),
    is_cancelled: CancellationProbe = Depends(get_cancellation_probe)
):
    """Orders created between two dates, both days included"""
    service = OrderAggregationService(db, is_cancelled=is_cancelled)
    return await service.get_history(identity.merchant_id, history.date_from, history.date_to)


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity),
    is_cancelled: CancellationProbe = Depends(get_cancellation_probe)
):
    """Get one order by ID"""
    service = OrderAggregationService(db, is_cancelled=is_cancelled)
    return await service.get_by_id(identity.merchant_id, order_id)


@router.get("/{order_id}/payments", response_model=PaymentsResponse)
async def get_order_payments(
    order_id: int,
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity)
):
    """List payments of an order"""
    payments = await PaymentService(db).list_payments(identity.merchant_id, order_id)
    return PaymentsResponse(
        order_id=order_id,
        payments=[Payment.model_validate(p) for p in payments],
    )


@router.delete("/{order_id}/payments/{payment_id}", response_model=Payment)
async def disable_order_payment(
    order_id: int,
    payment_id: int,
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity)
):
    """Disable a payment; the row is kept with enabled = 0"""
    payment = await PaymentService(db).disable_payment(identity.merchant_id, order_id, payment_id)
    logger.info(f"User {identity.user_id} disabled payment {payment_id} of order {order_id}")
    return payment
