from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey
from app.db.base import Base

class Payment(Base):
    __tablename__ = 'payments'

    payment_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.order_id'), nullable=False, index=True)
    mop = Column(String(50))  # means of payment
    amount = Column(Float, default=0)
    payment_date = Column(DateTime)
    enabled = Column(Integer, default=1)
