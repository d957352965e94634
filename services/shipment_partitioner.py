"""
Shipment partitioner.

Turns the flat cart into planned shipments, one per collection. When an
existing order is edited, persisted shipments are reconciled with the
current cart by item membership (SKU), not by position.

Ids are derived deterministically so that user overrides keyed by
shipment id survive recomputation.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import structlog

from models.cart import CartItem
from models.planned_shipment import (
    PlannedShipment,
    PersistedShipment,
    DateOverride,
    ShipmentOrigin,
    provisional_shipment_id,
    new_shipment_id,
)
from models.ship_window import CollectionWindow, DateRange
from services.ship_window import default_window, minimum_allowed_dates

logger = structlog.get_logger(__name__)


@dataclass
class PartitionResult:
    """Shipments plus persisted shipment ids that lost every item."""
    shipments: list[PlannedShipment]
    removed_shipment_ids: list[str] = field(default_factory=list)


def group_by_collection(items: list[CartItem]) -> dict[Optional[int], list[CartItem]]:
    """Group items by collection id in first-seen order; None is the ATS group."""
    groups: dict[Optional[int], list[CartItem]] = {}
    for item in items:
        groups.setdefault(item.collection_id, []).append(item)
    return groups


def collection_windows_for_items(items: list[CartItem]) -> list[CollectionWindow]:
    """
    Distinct collection windows of the given items.

    First-seen window wins per collection id. ATS items contribute nothing.
    """
    windows: dict[int, CollectionWindow] = {}
    for item in items:
        if item.collection_id is None or item.collection_id in windows:
            continue
        windows[item.collection_id] = CollectionWindow(
            id=item.collection_id,
            name=item.collection_name or "Collection",
            ship_window_start=item.ship_window_start,
            ship_window_end=item.ship_window_end,
        )
    return list(windows.values())


def _resolve_dates(
    defaults: DateRange,
    override: Optional[DateOverride]
) -> tuple[date, date]:
    if override is not None:
        return override.start, override.end
    return defaults.start, defaults.end


def _group_window(items: list[CartItem], fallback: DateRange) -> DateRange:
    first = items[0]
    return DateRange(
        start=first.ship_window_start or fallback.start,
        end=first.ship_window_end or fallback.end,
    )


def _partition_new_order(
    items: list[CartItem],
    overrides: dict[str, DateOverride],
    ats_defaults: DateRange
) -> list[PlannedShipment]:
    shipments = []
    for collection_id, group in group_by_collection(items).items():
        first = group[0]
        shipment_id = provisional_shipment_id(collection_id)
        start, end = _resolve_dates(
            _group_window(group, ats_defaults),
            overrides.get(shipment_id)
        )
        shipments.append(PlannedShipment(
            id=shipment_id,
            origin=ShipmentOrigin.PROVISIONAL,
            collection_id=collection_id,
            collection_name=first.collection_name,
            item_ids=[i.sku for i in group],
            planned_ship_start=start,
            planned_ship_end=end,
            min_allowed_start=first.ship_window_start,
            min_allowed_end=first.ship_window_end,
        ))
    return shipments


def _partition_edit_mode(
    items: list[CartItem],
    persisted: list[PersistedShipment],
    overrides: dict[str, DateOverride],
    ats_defaults: DateRange
) -> PartitionResult:
    shipments: list[PlannedShipment] = []
    removed: list[str] = []
    claimed: set[str] = set()

    existing_ats = next(
        (s for s in persisted if s.collection_id is None and not s.is_combined),
        None
    )

    # 1. Reconcile persisted shipments by item membership
    for stored in persisted:
        member_skus = set(stored.item_skus)
        members = [
            i for i in items
            if i.sku in member_skus and i.sku not in claimed
        ]
        if not members:
            # Deleted on save
            removed.append(stored.id)
            continue

        min_start = stored.ship_window_start
        min_end = stored.ship_window_end
        if (stored.is_combined or stored.collection_id is not None) and (min_start is None or min_end is None):
            # Bounds not stored with the shipment; take them from its items
            rebuilt = minimum_allowed_dates(collection_windows_for_items(members))
            min_start = min_start or rebuilt.min_start
            min_end = min_end or rebuilt.min_end

        start, end = _resolve_dates(
            DateRange(start=stored.planned_ship_start, end=stored.planned_ship_end),
            overrides.get(stored.id)
        )
        shipments.append(PlannedShipment(
            id=stored.id,
            origin=ShipmentOrigin.PERSISTED,
            collection_id=stored.collection_id,
            collection_name=stored.collection_name,
            item_ids=[i.sku for i in members],
            planned_ship_start=start,
            planned_ship_end=end,
            min_allowed_start=min_start,
            min_allowed_end=min_end,
            is_combined=stored.is_combined,
            original_shipment_ids=list(stored.original_shipment_ids) if stored.is_combined else [],
        ))
        claimed.update(i.sku for i in members)

    # 2. Items added during the edit
    new_items = [i for i in items if i.sku not in claimed]
    for collection_id, group in group_by_collection(new_items).items():
        first = group[0]
        shipment_id = new_shipment_id(collection_id)

        if collection_id is None and existing_ats is not None:
            # Keep the user's earlier ATS dates instead of resetting them
            defaults = DateRange(
                start=existing_ats.planned_ship_start,
                end=existing_ats.planned_ship_end,
            )
        else:
            defaults = _group_window(group, ats_defaults)

        start, end = _resolve_dates(defaults, overrides.get(shipment_id))
        shipments.append(PlannedShipment(
            id=shipment_id,
            origin=ShipmentOrigin.NEW,
            collection_id=collection_id,
            collection_name=first.collection_name,
            item_ids=[i.sku for i in group],
            planned_ship_start=start,
            planned_ship_end=end,
            min_allowed_start=first.ship_window_start,
            min_allowed_end=first.ship_window_end,
        ))

    return PartitionResult(shipments=shipments, removed_shipment_ids=removed)


def partition_shipments(
    items: list[CartItem],
    persisted: Optional[list[PersistedShipment]] = None,
    overrides: Optional[dict[str, DateOverride]] = None,
    today: Optional[date] = None
) -> PartitionResult:
    """
    Partition cart items into planned shipments.

    Every item ends up in exactly one shipment. With persisted shipments
    (edit mode), persisted ids are kept for shipments that still have
    items and reported in removed_shipment_ids otherwise.

    Args:
        items: Current cart lines
        persisted: Shipments saved with the order being edited
        overrides: User dates keyed by shipment id
        today: Reference date for default ATS windows

    Returns:
        PartitionResult
    """
    overrides = overrides or {}
    ats_defaults = default_window(today)

    if not items:
        return PartitionResult(
            shipments=[],
            removed_shipment_ids=[s.id for s in persisted or []]
        )

    if persisted:
        result = _partition_edit_mode(items, persisted, overrides, ats_defaults)
    else:
        result = PartitionResult(
            shipments=_partition_new_order(items, overrides, ats_defaults)
        )

    logger.debug(
        "shipments_partitioned",
        item_count=len(items),
        shipment_count=len(result.shipments),
        edit_mode=bool(persisted),
        removed=result.removed_shipment_ids,
    )
    return result
