"""
Validation aggregator and submission gate.

Validates every final shipment against its collections and collects a
per-shipment error map. Submission is allowed when the map is empty, or
when the user confirmed the override and every error is overridable.
Inverted ranges (end before start) are never overridable.
"""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from models.cart import CartItem
from models.planned_shipment import PlannedShipment, PlanningState
from models.ship_window import CollectionWindow, DateField
from models.shipment_plan import ShipmentFieldErrors
from services.ship_window import validate_ship_dates
from services.shipment_partitioner import collection_windows_for_items
from services.combinability import constraint_window

logger = structlog.get_logger(__name__)


@dataclass
class ShipmentValidationSummary:
    """Per-shipment field errors for the whole plan."""
    errors: dict[str, ShipmentFieldErrors] = field(default_factory=dict)
    blocking_shipment_ids: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def has_blocking_errors(self) -> bool:
        return len(self.blocking_shipment_ids) > 0


def constraints_for_shipment(
    shipment: PlannedShipment,
    items: list[CartItem]
) -> list[CollectionWindow]:
    """
    Windows a shipment's dates must satisfy.

    Combined shipments answer to every distinct collection among their
    items; others to the window formed by their own min-allowed bounds.
    """
    if shipment.is_combined:
        member_skus = set(shipment.item_ids)
        return collection_windows_for_items([i for i in items if i.sku in member_skus])

    if shipment.is_unconstrained:
        return []
    window = constraint_window(shipment)
    return [window.model_copy(update={"name": window.name or "Collection"})]


def validate_shipments(
    shipments: list[PlannedShipment],
    items: list[CartItem]
) -> ShipmentValidationSummary:
    """
    Validate all shipments.

    Only failing shipments appear in the error map, each with the first
    message per date field.
    """
    summary = ShipmentValidationSummary()

    for shipment in shipments:
        result = validate_ship_dates(
            shipment.planned_ship_start,
            shipment.planned_ship_end,
            constraints_for_shipment(shipment, items)
        )
        if result.valid:
            continue

        start_error = result.first_error(DateField.START)
        end_error = result.first_error(DateField.END)
        summary.errors[shipment.id] = ShipmentFieldErrors(
            start=start_error.message if start_error else None,
            end=end_error.message if end_error else None,
        )
        if any(not e.overridable for e in result.errors):
            summary.blocking_shipment_ids.append(shipment.id)

    if summary.has_errors:
        logger.info(
            "shipment_validation_failed",
            shipment_ids=list(summary.errors),
            blocking=summary.blocking_shipment_ids,
        )
    return summary


def can_submit(
    summary: ShipmentValidationSummary,
    override_confirmed: bool,
    missing_collection_skus: Optional[list[str]] = None
) -> bool:
    """Submission gate."""
    if missing_collection_skus:
        return False
    if not summary.has_errors:
        return True
    return override_confirmed and not summary.has_blocking_errors


def reconcile_override(
    state: PlanningState,
    summary: ShipmentValidationSummary
) -> PlanningState:
    """Reset a confirmed override once the errors are gone."""
    if state.override_confirmed and not summary.has_errors:
        logger.debug("shipment_override_reset")
        return state.model_copy(update={"override_confirmed": False})
    return state
