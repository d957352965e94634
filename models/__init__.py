"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.cart import (
    Currency,
    OrderType,
    SkuInfo,
    CartItem,
    CartSnapshot,
)
from models.ship_window import (
    CollectionWindow,
    DateRange,
    MinimumAllowedDates,
    DateField,
    ShipDateErrorKind,
    ShipDateError,
    ValidationResult,
)
from models.planned_shipment import (
    ShipmentOrigin,
    PlannedShipment,
    PersistedShipment,
    DateOverride,
    PlanningState,
)
from models.shipment_plan import (
    ShipmentFieldErrors,
    ShipmentPlan,
    SubmittedShipment,
    ShipmentSubmission,
)

__all__ = [
    # Base
    "BaseSchema",

    # Cart
    "Currency",
    "OrderType",
    "SkuInfo",
    "CartItem",
    "CartSnapshot",

    # Ship windows
    "CollectionWindow",
    "DateRange",
    "MinimumAllowedDates",
    "DateField",
    "ShipDateErrorKind",
    "ShipDateError",
    "ValidationResult",

    # Planned shipments
    "ShipmentOrigin",
    "PlannedShipment",
    "PersistedShipment",
    "DateOverride",
    "PlanningState",

    # Plans
    "ShipmentFieldErrors",
    "ShipmentPlan",
    "SubmittedShipment",
    "ShipmentSubmission",
]
