from sqlalchemy import Column, Integer, String, Text, Float, Boolean, ForeignKey
from app.db.base import Base

class Floor(Base):
    __tablename__ = 'floors'

    id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100))
    enabled = Column(Boolean, default=True)


class FloorArea(Base):
    """Drawn zone of a floor plan (terrace, bar...)."""
    __tablename__ = 'floor_areas'

    id = Column(Integer, primary_key=True, autoincrement=True)
    floor_id = Column(Integer, ForeignKey('floors.id'), nullable=False, index=True)
    name = Column(String(100))
    points = Column(Text)  # JSON polygon
    x = Column(Float)
    y = Column(Float)
    angle = Column(Float)
    stroke_color = Column(String(20))
    color = Column(String(20))
    enabled = Column(Boolean, default=True)
