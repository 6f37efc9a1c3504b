from fastapi import APIRouter
from app.api.v1.endpoints.orders import delivery_sessions, orders
from app.api.v1.endpoints.menu import menu
from app.api.v1.endpoints.locations import locations

api_router = APIRouter()

# Order routes
api_router.include_router(orders.router, prefix="/orders", tags=["Orders"])
api_router.include_router(delivery_sessions.router, prefix="/delivery_sessions", tags=["Delivery Sessions"])

# Catalog routes
api_router.include_router(menu.router, prefix="/menu", tags=["Menu"])

# Floor plan routes
api_router.include_router(locations.router, prefix="/locations", tags=["Locations"])
