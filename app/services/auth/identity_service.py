import logging
from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.auth.user import User, UserRights
from app.schemas.auth.identity_schema import Identity

logger = logging.getLogger(__name__)

PERMISSION_FLAGS = (
    "access_wrreception",
    "access_wrdelivery",
    "access_wrwaiter",
    "print_merchant_cash_report",
    "open_cash_drawer",
)


class IdentityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve(self, token: Optional[str]) -> Optional[Identity]:
        """Map an opaque app token to the user behind it, or None."""
        if not token:
            return None

        result = await self.db.execute(
            select(User.user_id, User.merchant_id, UserRights)
            .select_from(User)
            .join(UserRights, UserRights.id == User.access_id)
            .where(and_(UserRights.token == token, User.enabled == True))
            .limit(1)
        )
        row = result.first()
        if row is None:
            logger.info("Token did not resolve to an enabled user")
            return None

        user_id, merchant_id, rights = row
        permissions = [flag for flag in PERMISSION_FLAGS if getattr(rights, flag)]
        return Identity(user_id=user_id, merchant_id=merchant_id, permissions=permissions)
