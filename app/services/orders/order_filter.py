"""
Order predicate builder.

A view (pending, one order, a history range, the orders of some delivery
sessions) plus an optional app channel becomes one SQLAlchemy boolean clause.
Every order-side query of a batch selects from the same source,
`orders LEFT JOIN active_session`, so the clause can be appended to any of
them unchanged.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy import and_, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from app.core.exceptions import ValidationError
from app.models.delivery.delivery_session import (
    ACTIVE_SESSION_STATUSES, DeliverySession, DeliverySessionOrder
)
from app.models.orders.order import Order

logger = logging.getLogger(__name__)

PENDING_STATE = "OPEN"
PAYMENT_PENDING_BRAND_STATUS = "ONLINE_PAYMENT_PENDING"

# Link of an order to the delivery session currently running it
active_session = (
    select(
        DeliverySessionOrder.order_id.label("order_id"),
        DeliverySessionOrder.delivery_session_id.label("delivery_session_id"),
        DeliverySessionOrder.priority.label("priority"),
    )
    .join(DeliverySession, DeliverySession.id == DeliverySessionOrder.delivery_session_id)
    .where(DeliverySession.status.in_(ACTIVE_SESSION_STATUSES))
    .subquery("active_session")
)


def order_source():
    """FROM clause shared by every order-side query."""
    return Order.__table__.outerjoin(active_session, active_session.c.order_id == Order.order_id)


# --- Views -----------------------------------------------------------------

@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class ById:
    order_id: int


@dataclass(frozen=True)
class History:
    date_from: date
    date_to: date


@dataclass(frozen=True)
class SessionScoped:
    session_ids: Tuple[int, ...]


OrderView = Union[Pending, ById, History, SessionScoped]


# --- Channels --------------------------------------------------------------

class AppChannel(str, Enum):
    RECEPTION = "WR_RECEPTION"
    DELIVERY = "WR_DELIVERY"
    WAITER = "WR_WAITER"


_CHANNEL_ALIASES = {
    "WR_RECEPTION": AppChannel.RECEPTION,
    "0": AppChannel.RECEPTION,
    "WR_DELIVERY": AppChannel.DELIVERY,
    "1": AppChannel.DELIVERY,
    "WR_WAITER": AppChannel.WAITER,
    "2": AppChannel.WAITER,
}


def resolve_channel(channel: Optional[str]) -> Optional[AppChannel]:
    """Map a channel hint to an AppChannel; unknown hints resolve to None."""
    if channel is None or str(channel).strip() == "":
        return None
    resolved = _CHANNEL_ALIASES.get(str(channel).strip().upper())
    if resolved is None:
        logger.warning(f"Unknown app channel '{channel}', applying no channel restriction")
    return resolved


def channel_clause(channel: Optional[AppChannel]) -> Optional[ColumnElement]:
    if channel == AppChannel.DELIVERY:
        return and_(
            Order.order_type == "DELIVERY",
            Order.fulfillment_type == "DELIVERY_BY_RESTAURANT",
        )
    if channel == AppChannel.WAITER:
        return Order.order_type.not_in(["DELIVERY", "TAKE_AWAY"])
    return None


# --- Builder ---------------------------------------------------------------

@dataclass(frozen=True)
class OrderFilter:
    view: OrderView
    clause: ColumnElement

    @property
    def params(self) -> Dict[str, Any]:
        """Bound parameter values of the clause, keyed by placeholder name."""
        return dict(self.clause.compile().params)


def view_clause(view: OrderView) -> ColumnElement:
    if isinstance(view, Pending):
        return or_(
            and_(
                Order.state == PENDING_STATE,
                func.coalesce(Order.brand_status, "") != PAYMENT_PENDING_BRAND_STATUS,
            ),
            active_session.c.delivery_session_id.is_not(None),
        )
    if isinstance(view, ById):
        return Order.order_id == view.order_id
    if isinstance(view, History):
        if view.date_to < view.date_from:
            raise ValidationError("date_to must not be before date_from")
        start = datetime.combine(view.date_from, time.min)
        if view.date_to == date.max:
            # No day after the last representable date
            return Order.creation_date >= start
        end = datetime.combine(view.date_to + timedelta(days=1), time.min)
        return and_(Order.creation_date >= start, Order.creation_date < end)
    if isinstance(view, SessionScoped):
        return active_session.c.delivery_session_id.in_(list(view.session_ids))
    raise TypeError(f"Unsupported order view: {view!r}")


def build_order_filter(merchant_id: str, view: OrderView, channel: Optional[str] = None) -> OrderFilter:
    conditions = [Order.merchant_id == merchant_id, view_clause(view)]
    restriction = channel_clause(resolve_channel(channel))
    if restriction is not None:
        conditions.append(restriction)
    return OrderFilter(view=view, clause=and_(*conditions))
