from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from app.db.base import Base

ACCEPTED_BOOKING_STATUS = "ACCEPTED"

class Booking(Base):
    """A table reservation."""
    __tablename__ = 'bookings'

    booking_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    booking_number = Column(String(50))
    customer_id = Column(Integer, ForeignKey('customer.customer_id'), nullable=False)
    comment = Column(Text)
    party_size = Column(Integer, default=0)
    status = Column(String(20), nullable=False)  # PENDING, ACCEPTED, REFUSED, CANCELED

    # Stored in UTC
    booking_date_from = Column(DateTime)
    booking_date_to = Column(DateTime)
    booking_duration = Column(Integer)  # minutes


class BookedLocation(Base):
    __tablename__ = 'booked_location'

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey('bookings.booking_id'), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey('locations.location_id'), nullable=False)
