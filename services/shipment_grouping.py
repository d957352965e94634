"""
Shipment grouping overlay.

Users can combine shipments whose windows are compatible into a single
shipment, and split them again. The grouping map (combined id -> original
shipment ids) is applied on top of the partitioner output on every
recompute; the originals reappear as soon as the grouping is removed.
"""

from typing import Optional

import structlog

from models.cart import CartItem
from models.planned_shipment import (
    PlannedShipment,
    PlanningState,
    DateOverride,
    ShipmentOrigin,
    COMBINED_ID_PREFIX,
)
from models.ship_window import CollectionWindow
from services.ship_window import overlap, minimum_allowed_dates
from services.shipment_partitioner import collection_windows_for_items
from services.combinability import can_combine, constraint_window
from exceptions import ShipmentCombineError, ShipmentGroupNotFoundError

logger = structlog.get_logger(__name__)


def combined_shipment_id(shipment_ids: list[str]) -> str:
    """Deterministic id for a group, e.g. combined-shipment-1+shipment-2."""
    return COMBINED_ID_PREFIX + "+".join(shipment_ids)


def _constituent_windows(
    members: list[PlannedShipment],
    items: list[CartItem]
) -> list[CollectionWindow]:
    """
    Distinct collection windows behind a set of shipments.

    Taken from the member items' collections, so a shipment whose own
    bounds are missing still contributes its collections' windows.
    """
    member_skus = {sku for s in members for sku in s.item_ids}
    windows = {
        w.id: w for w in collection_windows_for_items(
            [i for i in items if i.sku in member_skus]
        )
    }
    for shipment in members:
        if shipment.collection_id is None or shipment.collection_id in windows:
            continue
        if shipment.is_unconstrained:
            continue
        windows[shipment.collection_id] = constraint_window(shipment)
    return list(windows.values())


def build_combined_shipment(
    combined_id: str,
    original_ids: list[str],
    members: list[PlannedShipment],
    items: list[CartItem],
    override: Optional[DateOverride] = None
) -> PlannedShipment:
    """
    Merge member shipments into one.

    Constraints are the most restrictive bounds of all underlying
    collections. Default dates are the common overlap, falling back to the
    minimum allowed dates, then to the first member's dates.
    """
    windows = _constituent_windows(members, items)
    minimum = minimum_allowed_dates(windows)
    common = overlap(windows)
    first = members[0]

    start = (
        (common.start if common else None)
        or minimum.min_start
        or first.planned_ship_start
    )
    end = (
        (common.end if common else None)
        or minimum.min_end
        or first.planned_ship_end
    )
    if override is not None:
        start, end = override.start, override.end

    return PlannedShipment(
        id=combined_id,
        origin=ShipmentOrigin.COMBINED,
        collection_id=None,
        collection_name=" + ".join(s.collection_name for s in members if s.collection_name),
        item_ids=[sku for s in members for sku in s.item_ids],
        planned_ship_start=start,
        planned_ship_end=end,
        min_allowed_start=minimum.min_start,
        min_allowed_end=minimum.min_end,
        is_combined=True,
        original_shipment_ids=list(original_ids),
    )


def apply_groupings(
    shipments: list[PlannedShipment],
    groupings: dict[str, list[str]],
    items: list[CartItem],
    overrides: Optional[dict[str, DateOverride]] = None
) -> list[PlannedShipment]:
    """
    Replace grouped shipments with their combined shipment.

    Shipments outside every group pass through unchanged. A shipment
    listed in several groups belongs to the first one only. A group whose
    members have all left the cart (or were claimed earlier) yields nothing.

    Returns:
        Ungrouped shipments followed by combined shipments
    """
    if not groupings:
        return list(shipments)

    overrides = overrides or {}
    grouped_ids = {sid for ids in groupings.values() for sid in ids}
    result = [s for s in shipments if s.id not in grouped_ids]

    consumed: set[str] = set()
    for combined_id, original_ids in groupings.items():
        members = [
            s for s in shipments
            if s.id in original_ids and s.id not in consumed
        ]
        if not members:
            continue
        claimed_ids = [sid for sid in original_ids if sid not in consumed]
        consumed.update(s.id for s in members)
        result.append(build_combined_shipment(
            combined_id,
            claimed_ids,
            members,
            items,
            overrides.get(combined_id)
        ))

    return result


def combine(
    state: PlanningState,
    shipments: list[PlannedShipment],
    shipment_ids: list[str]
) -> tuple[PlanningState, str]:
    """
    Record a grouping for the given shipments.

    Args:
        state: Current planning state
        shipments: Current plan (after overlay)
        shipment_ids: Shipments to combine (two or more)

    Returns:
        (new state, combined shipment id)

    Raises:
        ShipmentCombineError: Fewer than two ids, unknown or already
            combined shipments, or windows that do not overlap
    """
    if len(shipment_ids) < 2 or len(set(shipment_ids)) != len(shipment_ids):
        raise ShipmentCombineError("At least two distinct shipments are required", shipment_ids)

    by_id = {s.id: s for s in shipments}
    missing = [sid for sid in shipment_ids if sid not in by_id]
    if missing:
        raise ShipmentCombineError(f"Unknown shipments: {', '.join(missing)}", shipment_ids)

    members = [by_id[sid] for sid in shipment_ids]
    if any(s.is_combined for s in members):
        raise ShipmentCombineError("Combined shipments must be split first", shipment_ids)

    for i, a in enumerate(members):
        for b in members[i + 1:]:
            if not can_combine(a, b):
                raise ShipmentCombineError(
                    f"Ship windows of {a.id} and {b.id} do not overlap",
                    shipment_ids
                )

    combined_id = combined_shipment_id(shipment_ids)
    groupings = {**state.groupings, combined_id: list(shipment_ids)}

    logger.info(
        "shipments_combined",
        combined_id=combined_id,
        shipment_ids=shipment_ids,
    )
    return state.model_copy(update={"groupings": groupings}), combined_id


def split(state: PlanningState, combined_id: str) -> PlanningState:
    """
    Remove a grouping; its override is discarded with it.

    Raises:
        ShipmentGroupNotFoundError: No such grouping
    """
    if combined_id not in state.groupings:
        raise ShipmentGroupNotFoundError(combined_id)

    groupings = {k: v for k, v in state.groupings.items() if k != combined_id}
    overrides = {k: v for k, v in state.overrides.items() if k != combined_id}

    logger.info(
        "shipment_split",
        combined_id=combined_id,
        restored=state.groupings[combined_id],
    )
    return state.model_copy(update={"groupings": groupings, "overrides": overrides})
