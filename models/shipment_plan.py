"""
Shipment plan request/response schemas.

The API is stateless: every request carries the cart snapshot, the
persisted shipments (edit mode) and the current PlanningState, and every
response returns the recomputed plan together with the new state.
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import date
from decimal import Decimal

from models.base import BaseSchema
from models.cart import CartSnapshot
from models.planned_shipment import PlannedShipment, PersistedShipment, PlanningState


class ShipmentFieldErrors(BaseSchema):
    """First error message per date field of one shipment."""

    start: Optional[str] = None
    end: Optional[str] = None


class ShipmentPlan(BaseSchema):
    """Recomputed plan returned to the UI."""

    shipments: list[PlannedShipment]
    validation_errors: dict[str, ShipmentFieldErrors] = Field(default_factory=dict)
    has_shipment_validation_errors: bool = False
    has_blocking_errors: bool = False
    items_missing_collection: list[str] = Field(default_factory=list)
    can_submit: bool = True
    removed_shipment_ids: list[str] = Field(
        default_factory=list,
        description="Persisted shipments that lost all items (deleted on save)"
    )
    order_total: Decimal = Decimal("0")
    item_count: int = 0
    state: PlanningState


class SubmittedShipment(PlannedShipment):
    """Final shipment handed to order create/update."""

    allow_override: bool = False


class ShipmentSubmission(BaseSchema):
    """Authoritative shipment-splitting instruction for the order API."""

    shipments: list[SubmittedShipment]
    removed_shipment_ids: list[str] = Field(default_factory=list)
    allow_override: bool = False


# ===================
# REQUESTS
# ===================

class PlanRequest(BaseSchema):
    """Cart + persisted shipments + planning state."""

    cart: CartSnapshot
    persisted_shipments: list[PersistedShipment] = Field(default_factory=list)
    state: PlanningState = Field(default_factory=PlanningState)


class CombineRequest(PlanRequest):
    """Combine two or more shipments into one."""

    shipment_ids: list[str] = Field(..., min_length=2)

    @field_validator("shipment_ids")
    @classmethod
    def unique_ids(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError("Shipment ids must be unique")
        return v


class SplitRequest(PlanRequest):
    """Undo a combine."""

    combined_id: str = Field(..., min_length=1)


class UpdateDatesRequest(PlanRequest):
    """Set the user's dates for one shipment."""

    shipment_id: str = Field(..., min_length=1)
    start: date
    end: date


class ClearDatesRequest(PlanRequest):
    """Drop the user's dates for one shipment."""

    shipment_id: str = Field(..., min_length=1)


class OverrideRequest(PlanRequest):
    """Confirm (or withdraw) submitting despite window violations."""

    confirmed: bool
