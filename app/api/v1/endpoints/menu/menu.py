from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Union

from app.api.dependencies import get_cancellation_probe, get_current_identity
from app.core.database import get_async_session
from app.schemas.auth.identity_schema import Identity
from app.schemas.menu.menu_schema import MenuNoUpdateResponse, MenuResponse
from app.services.common.read_snapshot import CancellationProbe
from app.services.menu.menu_service import MenuService

router = APIRouter()


@router.get("", response_model=Union[MenuResponse, MenuNoUpdateResponse])
async def get_menu(
    last_menu_update: Optional[str] = Query(None, description="Catalog version held by the app, YYYY-MM-DD HH:MM:SS"),
    db: AsyncSession = Depends(get_async_session),
    identity: Identity = Depends(get_current_identity),
    is_cancelled: CancellationProbe = Depends(get_cancellation_probe)
):
    """
    Full catalog of the caller's merchant.
    Returns status "no_update_required" when the app already has the current version.
    """
    service = MenuService(db, is_cancelled=is_cancelled)
    return await service.get_menu(identity.merchant_id, last_menu_update)
