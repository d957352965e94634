"""
Business logic services.

Pure engine modules (ship_window, cart_builder, shipment_partitioner,
shipment_grouping, combinability, shipment_validation) plus the services
that orchestrate them.
"""

from services.shipment_planner_service import (
    ShipmentPlannerService,
    get_shipment_planner_service,
    compute_shipments,
)
from services.planned_shipment_service import (
    PlannedShipmentService,
    get_planned_shipment_service,
)

__all__ = [
    "ShipmentPlannerService",
    "get_shipment_planner_service",
    "compute_shipments",
    "PlannedShipmentService",
    "get_planned_shipment_service",
]
