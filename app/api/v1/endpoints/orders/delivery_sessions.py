from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_cancellation_probe, get_current_identity
from app.core.database import get_async_session
from app.schemas.auth.identity_schema import Identity
from app.schemas.orders.order_schema import DeliverySessionsResponse
from app.services.common.read_snapshot import CancellationProbe
from app.services.orders.order_service import OrderAggregationService

router = APIRouter()


@router.get("/pending", response_model=DeliverySessionsResponse)
async def get_pending_delivery_sessions(
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity),
    is_cancelled: CancellationProbe = Depends(get_cancellation_probe)
):
    """Active delivery sessions with their orders"""
    service = OrderAggregationService(db, is_cancelled=is_cancelled)
    return await service.get_delivery_sessions(identity.merchant_id)
