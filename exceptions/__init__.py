"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    DatabaseError,

    # Shipment planning
    ShipmentCombineError,
    ShipmentGroupNotFoundError,
    PlannedShipmentNotFoundError,
    ShipmentSubmissionBlockedError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "DatabaseError",

    # Shipment planning
    "ShipmentCombineError",
    "ShipmentGroupNotFoundError",
    "PlannedShipmentNotFoundError",
    "ShipmentSubmissionBlockedError",
]
