import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.auth.user import User
from app.models.delivery.delivery_session import ACTIVE_SESSION_STATUSES, DeliverySession as DeliverySessionModel
from app.schemas.orders.order_schema import (
    DeliveryManInfo, DeliverySession, DeliverySessionsResponse, Order,
    OrderHistoryResponse, PendingOrdersResponse,
)
from app.services.common.read_snapshot import BatchRunner, CancellationProbe, read_snapshot
from app.services.orders.order_assembler import assemble_orders
from app.services.orders.order_batch_fetcher import FetchStrategy, OrderBatchFetcher
from app.services.orders.order_filter import (
    ById, History, OrderView, Pending, SessionScoped, build_order_filter
)
from app.utils.row_helpers import parse_row_id

logger = logging.getLogger(__name__)


def build_delivery_session(row: Mapping[str, Any], orders: List[Order]) -> DeliverySession:
    return DeliverySession(
        delivery_session_id=row["id"],
        status=row["status"],
        orders=orders,
        delivery_man=DeliveryManInfo(
            user_id=row["user_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            profile_picture=row["profile_picture"],
            lat=row["lat"],
            lng=row["lng"],
            planning_color=row["planning_color"],
        ),
    )


def attach_orders(session_rows: Sequence[Mapping[str, Any]], orders: List[Order]) -> List[DeliverySession]:
    """Hand every session the already assembled orders that point at it."""
    by_session: Dict[int, List[Order]] = {}
    for order in orders:
        if order.delivery_session_id is not None:
            by_session.setdefault(order.delivery_session_id, []).append(order)
    return [build_delivery_session(row, by_session.get(row["id"], [])) for row in session_rows]


class OrderAggregationService:
    """
    Reads order aggregates for one merchant.

    Each public call runs in one read snapshot: the batch of flat queries is
    fetched with the configured strategy, then assembled in memory.
    """

    def __init__(self, db: AsyncSession, strategy: Optional[Union[FetchStrategy, str]] = None,
                 is_cancelled: Optional[CancellationProbe] = None):
        self.db = db
        self.strategy = FetchStrategy(strategy or settings.ORDER_FETCH_STRATEGY)
        self.is_cancelled = is_cancelled
        self.executed_steps: List[str] = []

    async def _aggregate(self, runner: BatchRunner, merchant_id: str, view: OrderView,
                         channel: Optional[str] = None) -> List[Order]:
        order_filter = build_order_filter(merchant_id, view, channel)
        rows = await OrderBatchFetcher(runner, merchant_id, self.strategy).fetch(order_filter)
        return assemble_orders(rows)

    async def _active_sessions(self, runner: BatchRunner, merchant_id: str):
        query = (
            select(
                DeliverySessionModel.id, DeliverySessionModel.status,
                User.user_id, User.first_name, User.last_name, User.profile_picture,
                User.lat, User.lng, User.planning_color,
            )
            .join(User, User.user_id == DeliverySessionModel.user_id)
            .where(
                and_(
                    DeliverySessionModel.merchant_id == merchant_id,
                    DeliverySessionModel.status.in_(ACTIVE_SESSION_STATUSES),
                )
            )
            .order_by(DeliverySessionModel.id)
        )
        return await runner.run("delivery_sessions", query)

    async def get_pending(self, merchant_id: str, channel: Optional[str] = None) -> PendingOrdersResponse:
        """Open orders plus orders riding an active delivery session."""
        async with read_snapshot(self.db, self.is_cancelled) as runner:
            self.executed_steps = runner.steps
            orders = await self._aggregate(runner, merchant_id, Pending(), channel)
            if not orders:
                return PendingOrdersResponse()
            session_rows = await self._active_sessions(runner, merchant_id)

        logger.info(f"Pending orders for merchant {merchant_id}: {len(orders)} orders, {len(session_rows)} sessions")
        return PendingOrdersResponse(orders=orders, delivery_sessions=attach_orders(session_rows, orders))

    async def get_by_id(self, merchant_id: str, order_id: Union[int, str]) -> Order:
        order_key = parse_row_id(order_id)
        if order_key is None:
            raise NotFoundError(f"Order {order_id} not found")

        async with read_snapshot(self.db, self.is_cancelled) as runner:
            self.executed_steps = runner.steps
            orders = await self._aggregate(runner, merchant_id, ById(order_key))

        if not orders:
            raise NotFoundError(f"Order {order_id} not found")
        return orders[0]

    async def get_history(self, merchant_id: str, date_from: date, date_to: date) -> OrderHistoryResponse:
        view = History(date_from=date_from, date_to=date_to)
        async with read_snapshot(self.db, self.is_cancelled) as runner:
            self.executed_steps = runner.steps
            orders = await self._aggregate(runner, merchant_id, view)

        logger.info(f"History {date_from}..{date_to} for merchant {merchant_id}: {len(orders)} orders")
        return OrderHistoryResponse(orders=orders)

    async def get_delivery_sessions(self, merchant_id: str) -> DeliverySessionsResponse:
        """Active delivery sessions, each with the orders it carries."""
        async with read_snapshot(self.db, self.is_cancelled) as runner:
            self.executed_steps = runner.steps
            session_rows = await self._active_sessions(runner, merchant_id)
            if not session_rows:
                return DeliverySessionsResponse()
            view = SessionScoped(session_ids=tuple(row["id"] for row in session_rows))
            orders = await self._aggregate(runner, merchant_id, view)

        return DeliverySessionsResponse(delivery_sessions=attach_orders(session_rows, orders))
