from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey
from app.db.base import Base

class OrderComment(Base):
    __tablename__ = 'order_comments'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.order_id'), nullable=False, index=True)
    # NULL for order-level comments, set for comments on a single item
    order_item_id = Column(Integer, ForeignKey('orderitems.order_item_id'), nullable=True)
    user_id = Column(Integer, nullable=True)
    content = Column(Text)
    creation_date = Column(DateTime)
