from sqlalchemy import Column, Integer, String, Text, Float, Boolean, ForeignKey
from app.db.base import Base

class Location(Base):
    """A table, counter or zone of the restaurant."""
    __tablename__ = 'locations'

    location_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    location_name = Column(String(100), nullable=False)
    location_desc = Column(Text)
    seats = Column(Integer, default=0)
    location_order = Column(Integer, default=0)
    enabled = Column(Boolean, default=True)

    # Floor plan placement
    floor_id = Column(Integer, ForeignKey('floors.id'))
    shape = Column(String(30))
    current_x = Column(Float)
    current_y = Column(Float)
    current_width = Column(Float)
    current_height = Column(Float)
    angle = Column(Float)


class OrderLocation(Base):
    __tablename__ = 'order_location'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.order_id'), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey('locations.location_id'), nullable=False)
