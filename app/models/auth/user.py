from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey
from app.db.base import Base

class UserRights(Base):
    """Access profile of a staff account; `token` is the app session token."""
    __tablename__ = "users_rights"

    id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    token = Column(String(255), unique=True, index=True)
    access_wrreception = Column(Boolean, default=False)
    access_wrdelivery = Column(Boolean, default=False)
    access_wrwaiter = Column(Boolean, default=False)
    print_merchant_cash_report = Column(Boolean, default=False)
    open_cash_drawer = Column(Boolean, default=False)


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    access_id = Column(Integer, ForeignKey("users_rights.id"), nullable=True)
    user_name = Column("userName", String(100))
    first_name = Column(String(100))
    last_name = Column(String(100))
    tel = Column(String(30))
    profile_picture = Column(String(500))
    planning_color = Column(String(20))
    lat = Column(Float)
    lng = Column(Float)
    enabled = Column(Boolean, default=True)
