"""
Planned shipment schemas.

A planned shipment is a subset of an order's lines that ship together on
the same proposed dates. Planned shipments are a derived view: they are
recomputed from the cart, the persisted shipments (edit mode) and the
PlanningState on every change. Only PlanningState is mutable state, and it
belongs to the caller.
"""

from pydantic import Field
from typing import Optional
from enum import Enum
from datetime import date

from models.base import BaseSchema


class ShipmentOrigin(str, Enum):
    """
    Where a shipment id comes from.

    PROVISIONAL: new order, id derived from collection (shipment-{id} / shipment-default)
    NEW:         edit mode, items added since load (new-{id} / new-ats)
    PERSISTED:   edit mode, stored shipment id
    COMBINED:    id minted by the grouping overlay
    """
    PROVISIONAL = "PROVISIONAL"
    NEW = "NEW"
    PERSISTED = "PERSISTED"
    COMBINED = "COMBINED"


DEFAULT_SHIPMENT_ID = "shipment-default"
NEW_ATS_SHIPMENT_ID = "new-ats"
COMBINED_ID_PREFIX = "combined-"


def provisional_shipment_id(collection_id: Optional[int]) -> str:
    """Stable id for a new-order group so overrides survive recomputation."""
    if collection_id is None:
        return DEFAULT_SHIPMENT_ID
    return f"shipment-{collection_id}"


def new_shipment_id(collection_id: Optional[int]) -> str:
    """Stable id for items added while editing a persisted order."""
    if collection_id is None:
        return NEW_ATS_SHIPMENT_ID
    return f"new-{collection_id}"


class PlannedShipment(BaseSchema):
    """One shipment of the current plan."""

    id: str
    origin: ShipmentOrigin
    collection_id: Optional[int] = None
    collection_name: Optional[str] = None
    item_ids: list[str] = Field(default_factory=list, description="SKUs in this shipment")
    planned_ship_start: date
    planned_ship_end: date
    min_allowed_start: Optional[date] = None
    min_allowed_end: Optional[date] = None
    is_combined: bool = False
    original_shipment_ids: list[str] = Field(default_factory=list)
    can_combine_with: list[str] = Field(default_factory=list)

    @property
    def is_unconstrained(self) -> bool:
        return self.min_allowed_start is None and self.min_allowed_end is None


class PersistedShipment(BaseSchema):
    """Shipment saved with an existing order (edit-mode input)."""

    id: str
    collection_id: Optional[int] = None
    collection_name: Optional[str] = None
    item_skus: list[str] = Field(default_factory=list)
    planned_ship_start: date
    planned_ship_end: date
    ship_window_start: Optional[date] = Field(
        None,
        description="Stored collection window start; None for ATS and combined shipments"
    )
    ship_window_end: Optional[date] = None
    is_combined: bool = False
    original_shipment_ids: list[str] = Field(default_factory=list)


class DateOverride(BaseSchema):
    """Dates the user typed for one shipment."""

    start: date
    end: date


class PlanningState(BaseSchema):
    """
    User-owned planning state.

    overrides:          shipment id -> dates chosen by the user
    groupings:          combined id -> original shipment ids
    override_confirmed: user accepted submitting despite window violations
    """

    overrides: dict[str, DateOverride] = Field(default_factory=dict)
    groupings: dict[str, list[str]] = Field(default_factory=dict)
    override_confirmed: bool = False
