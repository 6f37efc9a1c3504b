from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime

class BookingCustomer(BaseModel):
    customer_id: int
    customer_name: Optional[str] = None
    customer_tel: Optional[str] = None

class Booking(BaseModel):
    """An accepted reservation, listed once per booked location."""
    booking_id: int
    booking_number: Optional[str] = None
    comment: Optional[str] = None
    party_size: int = 0
    location_id: int
    booking_date_from: Optional[datetime] = None
    booking_date_to: Optional[datetime] = None
    booking_duration: Optional[int] = None
    customer: BookingCustomer

class FloorLocation(BaseModel):
    location_id: int
    location_name: str
    location_desc: Optional[str] = None
    seats: int = 0
    location_order: int = 0
    available: int = 1  # 0 while an open order sits at the location
    open_order_id: Optional[int] = None
    open_order_ids: List[int] = Field(default_factory=list)
    floor_id: Optional[int] = None
    shape: Optional[str] = None
    current_x: Optional[float] = None
    current_y: Optional[float] = None
    current_width: Optional[float] = None
    current_height: Optional[float] = None
    angle: Optional[float] = None
    bookings: List[Booking] = Field(default_factory=list)

class Floor(BaseModel):
    id: int
    name: Optional[str] = None

class FloorArea(BaseModel):
    id: int
    floor_id: int
    name: Optional[str] = None
    points: Any = None  # decoded polygon, None when the stored JSON is unreadable
    x: Optional[float] = None
    y: Optional[float] = None
    angle: Optional[float] = None
    stroke_color: Optional[str] = None
    color: Optional[str] = None

class LocationsResponse(BaseModel):
    locations: List[FloorLocation] = Field(default_factory=list)
    floors: List[Floor] = Field(default_factory=list)
    areas: List[FloorArea] = Field(default_factory=list)
    bookings: List[Booking] = Field(default_factory=list)
