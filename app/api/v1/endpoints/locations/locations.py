from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_cancellation_probe, get_current_identity
from app.core.database import get_async_session
from app.schemas.auth.identity_schema import Identity
from app.schemas.locations.location_schema import LocationsResponse
from app.services.common.read_snapshot import CancellationProbe
from app.services.locations.location_service import LocationsService

router = APIRouter()


@router.get("", response_model=LocationsResponse)
async def get_locations(
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity),
    is_cancelled: CancellationProbe = Depends(get_cancellation_probe)
):
    """
    Floor plan of the caller's merchant: locations with their open orders
    and upcoming bookings, floors and floor areas.
    """
    service = LocationsService(db, is_cancelled=is_cancelled)
    return await service.get_locations(identity.merchant_id)
