"""
Combinability analysis: which shipments may be merged with which.
"""

from models.planned_shipment import PlannedShipment
from models.ship_window import CollectionWindow
from services.ship_window import windows_overlap


def constraint_window(shipment: PlannedShipment) -> CollectionWindow:
    """Window formed by a shipment's min-allowed bounds."""
    return CollectionWindow(
        id=shipment.collection_id or 0,
        name=shipment.collection_name or "",
        ship_window_start=shipment.min_allowed_start,
        ship_window_end=shipment.min_allowed_end,
    )


def can_combine(a: PlannedShipment, b: PlannedShipment) -> bool:
    """
    Whether two shipments may be combined.

    Combined shipments are never candidates (split first). Unconstrained
    shipments (ATS) have nothing to conflict with and combine with anything.
    """
    if a.id == b.id or a.is_combined or b.is_combined:
        return False
    return windows_overlap(constraint_window(a), constraint_window(b))


def annotate_combinability(shipments: list[PlannedShipment]) -> list[PlannedShipment]:
    """
    Return copies of the shipments with can_combine_with filled in.

    The relation is symmetric since can_combine() is.
    """
    annotated = []
    for shipment in shipments:
        if shipment.is_combined:
            annotated.append(shipment.model_copy(update={"can_combine_with": []}))
            continue
        partners = [other.id for other in shipments if can_combine(shipment, other)]
        annotated.append(shipment.model_copy(update={"can_combine_with": partners}))
    return annotated
