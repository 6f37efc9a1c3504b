from typing import Optional
from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_async_session
from app.core.exceptions import AuthorizationError
from app.schemas.auth.identity_schema import Identity
from app.services.auth.identity_service import IdentityService
from app.services.common.read_snapshot import CancellationProbe
import logging

logger = logging.getLogger(__name__)


def extract_token(authorization: Optional[str], query_token: Optional[str] = None) -> Optional[str]:
    """Token from `Authorization: Bearer x`, a bare `Authorization: x`, or `?token=x`."""
    if authorization:
        value = authorization.strip()
        if value.lower().startswith("bearer "):
            value = value[7:].strip()
        if value:
            return value
    if query_token:
        return query_token.strip() or None
    return None


async def get_current_identity(
    request: Request,
    token: Optional[str] = Query(None, include_in_schema=False),
    session: AsyncSession = Depends(get_async_session)
) -> Identity:
    """Resolve the caller; any failure is a 401"""
    raw_token = extract_token(request.headers.get("Authorization"), token)
    if raw_token is None:
        raise AuthorizationError("Missing authentication token")

    identity = await IdentityService(session).resolve(raw_token)
    if identity is None:
        raise AuthorizationError()

    request.state.identity = identity
    return identity


async def get_cancellation_probe(request: Request) -> CancellationProbe:
    """Probe checked between batch steps: has the client gone away?"""
    return request.is_disconnected
