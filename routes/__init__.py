"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.shipment_plans import router as shipment_plans_router
from routes.ship_windows import router as ship_windows_router
from routes.orders import router as orders_router

__all__ = [
    "shipment_plans_router",
    "ship_windows_router",
    "orders_router",
]
