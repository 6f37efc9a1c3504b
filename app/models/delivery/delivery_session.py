from sqlalchemy import Column, Integer, String, ForeignKey
from app.db.base import Base

# Legacy rows store either the numeric code or the label
ACTIVE_SESSION_STATUSES = ("1", "PENDING")

class DeliverySession(Base):
    """A driver's delivery run."""
    __tablename__ = 'delivery_session'

    id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False)
    status = Column(String(20), nullable=False)


class DeliverySessionOrder(Base):
    __tablename__ = 'delivery_session_order'

    id = Column(Integer, primary_key=True, autoincrement=True)
    delivery_session_id = Column(Integer, ForeignKey('delivery_session.id'), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey('orders.order_id'), nullable=False, index=True)
    priority = Column(Integer)
