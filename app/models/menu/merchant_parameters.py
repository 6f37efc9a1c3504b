from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.db.base import Base

class MerchantParameters(Base):
    __tablename__ = 'merchant_parameters'

    merchant_id = Column(String(64), primary_key=True)
    # Bumped by the back-office whenever the catalog changes
    last_menu_update = Column(DateTime)


class Delay(Base):
    """Preset "ready in N minutes" choices shown next to the menu."""
    __tablename__ = 'delays'

    id = Column(Integer, primary_key=True, autoincrement=True)
    short_description = Column(String(100))
    duration = Column(Integer, default=0)
    enabled = Column(Boolean, default=True)
