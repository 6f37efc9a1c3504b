import logging
from typing import List

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, StorageError
from app.models.orders.order import Order
from app.models.orders.payment import Payment
from app.utils.row_helpers import parse_row_id

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _ensure_order(self, merchant_id: str, order_id: int) -> None:
        if parse_row_id(order_id) is None:
            raise NotFoundError(f"Order {order_id} not found")
        result = await self.db.execute(
            select(Order.order_id).where(and_(Order.order_id == order_id, Order.merchant_id == merchant_id))
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError(f"Order {order_id} not found")

    async def list_payments(self, merchant_id: str, order_id: int) -> List[Payment]:
        """All payment rows of one order, disabled ones included."""
        try:
            await self._ensure_order(merchant_id, order_id)
            result = await self.db.execute(
                select(Payment).where(Payment.order_id == order_id).order_by(Payment.payment_id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing payments of order {order_id}: {e}")
            raise StorageError(step="payments") from e

    async def disable_payment(self, merchant_id: str, order_id: int, payment_id: int) -> Payment:
        if parse_row_id(order_id) is None or parse_row_id(payment_id) is None:
            raise NotFoundError(f"Payment {payment_id} not found for order {order_id}")
        try:
            result = await self.db.execute(
                select(Payment)
                .join(Order, Order.order_id == Payment.order_id)
                .where(
                    and_(
                        Payment.payment_id == payment_id,
                        Payment.order_id == order_id,
                        Order.merchant_id == merchant_id,
                    )
                )
            )
            payment = result.scalar_one_or_none()
            if not payment:
                raise NotFoundError(f"Payment {payment_id} not found for order {order_id}")

            payment.enabled = 0
            await self.db.commit()
            await self.db.refresh(payment)
            logger.info(f"Payment {payment_id} of order {order_id} disabled")
            return payment
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Error disabling payment {payment_id}: {e}")
            raise StorageError(step="disable_payment") from e
