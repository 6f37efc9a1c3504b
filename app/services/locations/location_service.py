"""
Floor plan aggregate: locations with their current occupancy, the accepted
bookings attached to them, floors and drawn floor areas, read in one snapshot.
"""
import json
import logging
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.locations.booking import ACCEPTED_BOOKING_STATUS, BookedLocation, Booking as BookingModel
from app.models.locations.floor import Floor as FloorModel, FloorArea as FloorAreaModel
from app.models.orders.order import Customer, Order
from app.models.orders.order_location import Location, OrderLocation
from app.schemas.locations.location_schema import (
    Booking, BookingCustomer, Floor, FloorArea, FloorLocation, LocationsResponse
)
from app.services.common.read_snapshot import CancellationProbe, read_snapshot
from app.utils.row_helpers import as_int, group_rows

logger = logging.getLogger(__name__)

# Orders in these states no longer hold their table
RELEASED_ORDER_STATES = ("DELETED", "DONE", "CANCELED", "CLOSED")


def build_booking(row: Mapping[str, Any]) -> Booking:
    return Booking(
        booking_id=row["booking_id"],
        booking_number=row["booking_number"],
        comment=row["comment"],
        party_size=as_int(row["party_size"]),
        location_id=row["location_id"],
        booking_date_from=row["booking_date_from"],
        booking_date_to=row["booking_date_to"],
        booking_duration=row["booking_duration"],
        customer=BookingCustomer(
            customer_id=row["customer_id"],
            customer_name=row["customer_name"],
            customer_tel=row["customer_tel"],
        ),
    )


def parse_points(value: Optional[str]) -> Any:
    if not value:
        return None
    try:
        return json.loads(value)
    except ValueError:
        logger.warning(f"Unreadable floor area points: {value[:50]!r}")
        return None


def build_area(row: Mapping[str, Any]) -> FloorArea:
    return FloorArea(
        id=row["id"],
        floor_id=row["floor_id"],
        name=row["name"],
        points=parse_points(row["points"]),
        x=row["x"],
        y=row["y"],
        angle=row["angle"],
        stroke_color=row["stroke_color"],
        color=row["color"],
    )


def build_locations(location_rows: List[Mapping[str, Any]], bookings: List[Booking]) -> List[FloorLocation]:
    """One entry per location; occupancy rows of the same location are folded together."""
    bookings_by_location = group_rows(
        [{"location_id": b.location_id, "booking": b} for b in bookings], "location_id"
    )
    locations = {}
    for row in location_rows:
        location = locations.get(row["location_id"])
        if location is None:
            location = FloorLocation(
                location_id=row["location_id"],
                location_name=row["location_name"],
                location_desc=row["location_desc"],
                seats=as_int(row["seats"]),
                location_order=as_int(row["location_order"]),
                floor_id=row["floor_id"],
                shape=row["shape"],
                current_x=row["current_x"],
                current_y=row["current_y"],
                current_width=row["current_width"],
                current_height=row["current_height"],
                angle=row["angle"],
                bookings=[b["booking"] for b in bookings_by_location.get(row["location_id"], [])],
            )
            locations[row["location_id"]] = location
        if row["open_order_id"] is not None:
            location.open_order_ids.append(row["open_order_id"])

    for location in locations.values():
        if location.open_order_ids:
            location.open_order_ids.sort()
            location.open_order_id = location.open_order_ids[0]
            location.available = 0
    return list(locations.values())


class LocationsService:
    """Floor plan of one merchant."""

    def __init__(self, db: AsyncSession, is_cancelled: Optional[CancellationProbe] = None):
        self.db = db
        self.is_cancelled = is_cancelled
        self.executed_steps: List[str] = []

    async def get_locations(self, merchant_id: str, now: Optional[datetime] = None) -> LocationsResponse:
        now = now or datetime.utcnow()
        booked_after = now - timedelta(hours=settings.BOOKING_LOOKBACK_HOURS)

        async with read_snapshot(self.db, self.is_cancelled) as runner:
            self.executed_steps = runner.steps
            location_rows = await runner.run("locations", self.locations_query(merchant_id))
            booking_rows = await runner.run("bookings", self.bookings_query(merchant_id, booked_after))
            floor_rows = await runner.run("floors", self.floors_query(merchant_id))
            area_rows = await runner.run("areas", self.areas_query(merchant_id))

        bookings = [build_booking(row) for row in booking_rows]
        locations = build_locations(location_rows, bookings)
        logger.info(
            f"Locations of merchant {merchant_id}: {len(locations)} locations, "
            f"{sum(1 for loc in locations if not loc.available)} occupied, {len(bookings)} bookings"
        )
        return LocationsResponse(
            locations=locations,
            floors=[Floor(id=row["id"], name=row["name"]) for row in floor_rows],
            areas=[build_area(row) for row in area_rows],
            bookings=bookings,
        )

    # --- Queries -----------------------------------------------------------

    def locations_query(self, merchant_id: str):
        occupancy = (
            select(OrderLocation.location_id, OrderLocation.order_id)
            .join(Order, Order.order_id == OrderLocation.order_id)
            .where(
                Order.merchant_id == merchant_id,
                Order.state.not_in(RELEASED_ORDER_STATES),
            )
            .distinct()
            .subquery("occupancy")
        )
        return (
            select(
                Location.location_id, Location.location_name, Location.location_desc, Location.seats,
                Location.location_order, Location.floor_id, Location.shape,
                Location.current_x, Location.current_y, Location.current_width, Location.current_height,
                Location.angle, occupancy.c.order_id.label("open_order_id"),
            )
            .select_from(Location)
            .outerjoin(occupancy, occupancy.c.location_id == Location.location_id)
            .where(Location.merchant_id == merchant_id, Location.enabled.is_(True))
            .order_by(Location.location_order, Location.location_id, occupancy.c.order_id)
        )

    def bookings_query(self, merchant_id: str, booked_after: datetime):
        return (
            select(
                BookingModel.booking_id, BookingModel.booking_number, BookingModel.comment,
                BookingModel.party_size, BookedLocation.location_id, BookingModel.booking_date_from,
                BookingModel.booking_date_to, BookingModel.booking_duration,
                Customer.customer_id, Customer.customer_name, Customer.customer_tel,
            )
            .select_from(BookingModel)
            .join(BookedLocation, BookedLocation.booking_id == BookingModel.booking_id)
            .join(Location, Location.location_id == BookedLocation.location_id)
            .join(Customer, Customer.customer_id == BookingModel.customer_id)
            .where(
                BookingModel.merchant_id == merchant_id,
                BookingModel.status == ACCEPTED_BOOKING_STATUS,
                BookingModel.booking_date_to > booked_after,
            )
            .order_by(BookingModel.booking_date_from, BookingModel.booking_id, BookedLocation.location_id)
        )

    def floors_query(self, merchant_id: str):
        return (
            select(FloorModel.id, FloorModel.name)
            .where(FloorModel.merchant_id == merchant_id, FloorModel.enabled.is_(True))
            .order_by(FloorModel.id)
        )

    def areas_query(self, merchant_id: str):
        return (
            select(
                FloorAreaModel.id, FloorAreaModel.floor_id, FloorAreaModel.name, FloorAreaModel.points,
                FloorAreaModel.x, FloorAreaModel.y, FloorAreaModel.angle,
                FloorAreaModel.stroke_color, FloorAreaModel.color,
            )
            .join(FloorModel, FloorModel.id == FloorAreaModel.floor_id)
            .where(
                FloorModel.merchant_id == merchant_id,
                FloorAreaModel.enabled.is_(True),
                FloorModel.enabled.is_(True),
            )
            .order_by(FloorAreaModel.floor_id, FloorAreaModel.id)
        )
