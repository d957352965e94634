"""
Unit tests for the shipment partitioner.

Run: pytest tests/unit/test_shipment_partitioner.py -v
"""

from datetime import date

from services.cart_builder import build_cart_items
from services.shipment_partitioner import (
    partition_shipments,
    group_by_collection,
    collection_windows_for_items,
)
from models.planned_shipment import DateOverride, ShipmentOrigin
from tests.factories import SkuFactory, CartFactory, PersistedShipmentFactory
from tests.conftest import TODAY, SUMMER, FALL, HOLIDAY


# ===================
# HELPERS
# ===================

class TestGrouping:
    """Tests for group_by_collection() and collection_windows_for_items()"""

    def test_first_seen_order(self, three_collection_cart):
        groups = group_by_collection(build_cart_items(three_collection_cart))

        assert list(groups) == [10, 20, 30, None]

    def test_distinct_windows_first_seen_wins(self):
        stale_summer = {**SUMMER, "ship_window_end": date(2025, 7, 10)}
        cart = CartFactory.create(lines=[
            ("p", "A", 1, SkuFactory.create(**SUMMER)),
            ("p", "B", 1, SkuFactory.create(**stale_summer)),
            ("p", "C", 1, SkuFactory.create()),
        ])

        windows = collection_windows_for_items(build_cart_items(cart))

        assert len(windows) == 1
        assert windows[0].id == 10
        assert windows[0].ship_window_end == date(2025, 6, 30)


# ===================
# NEW ORDER MODE
# ===================

class TestNewOrderMode:
    """Tests for partition_shipments() without persisted shipments"""

    def test_one_shipment_per_collection(self, summer_cart):
        result = partition_shipments(build_cart_items(summer_cart), today=TODAY)

        assert [s.id for s in result.shipments] == ["shipment-10", "shipment-default"]
        summer, ats = result.shipments
        assert summer.item_ids == ["SUM-RED-S", "SUM-RED-M"]
        assert summer.origin == ShipmentOrigin.PROVISIONAL
        assert summer.collection_name == "Summer"
        assert ats.item_ids == ["ATS-TEE-L"]
        assert ats.collection_id is None
        assert result.removed_shipment_ids == []

    def test_collection_window_is_default_and_constraint(self, summer_cart):
        summer = partition_shipments(build_cart_items(summer_cart), today=TODAY).shipments[0]

        assert summer.planned_ship_start == date(2025, 6, 1)
        assert summer.planned_ship_end == date(2025, 6, 30)
        assert summer.min_allowed_start == date(2025, 6, 1)
        assert summer.min_allowed_end == date(2025, 6, 30)

    def test_ats_uses_default_window_and_is_unconstrained(self, summer_cart):
        ats = partition_shipments(build_cart_items(summer_cart), today=TODAY).shipments[1]

        assert ats.planned_ship_start == TODAY
        assert ats.planned_ship_end == date(2025, 5, 29)
        assert ats.is_unconstrained is True

    def test_override_wins(self, summer_cart):
        overrides = {"shipment-10": DateOverride(start=date(2025, 6, 5), end=date(2025, 6, 20))}

        summer = partition_shipments(
            build_cart_items(summer_cart), overrides=overrides, today=TODAY
        ).shipments[0]

        assert summer.planned_ship_start == date(2025, 6, 5)
        assert summer.planned_ship_end == date(2025, 6, 20)
        # Constraints are unaffected by overrides
        assert summer.min_allowed_start == date(2025, 6, 1)

    def test_override_survives_unrelated_cart_change(self, summer_cart):
        overrides = {"shipment-10": DateOverride(start=date(2025, 6, 5), end=date(2025, 6, 20))}
        grown = CartFactory.with_line(summer_cart, "prod-9", "HOL-X", 1, SkuFactory.create(**HOLIDAY))

        shipments = partition_shipments(build_cart_items(grown), overrides=overrides, today=TODAY).shipments
        summer = next(s for s in shipments if s.id == "shipment-10")

        assert summer.planned_ship_start == date(2025, 6, 5)

    def test_partition_is_total_and_disjoint(self, three_collection_cart):
        items = build_cart_items(three_collection_cart)

        shipments = partition_shipments(items, today=TODAY).shipments

        all_ids = [sku for s in shipments for sku in s.item_ids]
        assert len(all_ids) == len(set(all_ids))
        assert set(all_ids) == {i.sku for i in items}

    def test_removed_item_leaves_and_empty_shipment_drops(self, summer_cart):
        cart = CartFactory.without(summer_cart, "ATS-TEE-L", "SUM-RED-S")

        shipments = partition_shipments(build_cart_items(cart), today=TODAY).shipments

        assert [s.id for s in shipments] == ["shipment-10"]
        assert shipments[0].item_ids == ["SUM-RED-M"]

    def test_empty_cart(self):
        assert partition_shipments([], today=TODAY).shipments == []

    def test_idempotent(self, three_collection_cart):
        items = build_cart_items(three_collection_cart)
        overrides = {"shipment-default": DateOverride(start=date(2025, 5, 20), end=date(2025, 5, 25))}

        first = partition_shipments(items, overrides=overrides, today=TODAY)
        second = partition_shipments(items, overrides=overrides, today=TODAY)

        assert first.shipments == second.shipments


# ===================
# EDIT MODE
# ===================

class TestEditMode:
    """Tests for partition_shipments() reconciling persisted shipments"""

    def _persisted(self):
        return [
            PersistedShipmentFactory.create(
                id="901",
                collection_id=10,
                collection_name="Summer",
                item_skus=["SUM-RED-S", "SUM-RED-M"],
                planned_ship_start=date(2025, 6, 10),
                planned_ship_end=date(2025, 6, 25),
                ship_window_start=date(2025, 6, 1),
                ship_window_end=date(2025, 6, 30),
            ),
            PersistedShipmentFactory.create(
                id="902",
                item_skus=["ATS-TEE-L"],
                planned_ship_start=date(2025, 5, 1),
                planned_ship_end=date(2025, 5, 9),
            ),
        ]

    def test_persisted_ids_and_dates_are_kept(self, summer_cart):
        result = partition_shipments(build_cart_items(summer_cart), self._persisted(), today=TODAY)

        assert [s.id for s in result.shipments] == ["901", "902"]
        summer = result.shipments[0]
        assert summer.origin == ShipmentOrigin.PERSISTED
        assert summer.planned_ship_start == date(2025, 6, 10)
        assert summer.planned_ship_end == date(2025, 6, 25)
        assert summer.min_allowed_start == date(2025, 6, 1)

    def test_override_beats_persisted_dates(self, summer_cart):
        overrides = {"901": DateOverride(start=date(2025, 6, 12), end=date(2025, 6, 28))}

        summer = partition_shipments(
            build_cart_items(summer_cart), self._persisted(), overrides, today=TODAY
        ).shipments[0]

        assert summer.planned_ship_start == date(2025, 6, 12)

    def test_membership_not_position(self, summer_cart):
        # Same shipments stored in the opposite order
        persisted = list(reversed(self._persisted()))

        result = partition_shipments(build_cart_items(summer_cart), persisted, today=TODAY)

        by_id = {s.id: s for s in result.shipments}
        assert by_id["901"].item_ids == ["SUM-RED-S", "SUM-RED-M"]
        assert by_id["902"].item_ids == ["ATS-TEE-L"]

    def test_shipment_that_lost_all_items_is_reported(self, summer_cart):
        cart = CartFactory.without(summer_cart, "ATS-TEE-L")

        result = partition_shipments(build_cart_items(cart), self._persisted(), today=TODAY)

        assert [s.id for s in result.shipments] == ["901"]
        assert result.removed_shipment_ids == ["902"]

    def test_new_collection_items_get_new_ids(self, summer_cart):
        cart = CartFactory.with_line(summer_cart, "prod-5", "FALL-NEW", 1, SkuFactory.create(**FALL))

        result = partition_shipments(build_cart_items(cart), self._persisted(), today=TODAY)

        new = result.shipments[-1]
        assert new.id == "new-20"
        assert new.origin == ShipmentOrigin.NEW
        assert new.item_ids == ["FALL-NEW"]
        assert new.planned_ship_start == date(2025, 6, 15)
        assert new.min_allowed_end == date(2025, 7, 31)

    def test_new_sku_of_existing_collection_gets_new_shipment(self, summer_cart):
        cart = CartFactory.with_line(summer_cart, "prod-1", "SUM-RED-L", 1, SkuFactory.create(**SUMMER))

        result = partition_shipments(build_cart_items(cart), self._persisted(), today=TODAY)

        assert [s.id for s in result.shipments] == ["901", "902", "new-10"]

    def test_new_ats_items_inherit_existing_ats_dates(self, summer_cart):
        cart = CartFactory.with_line(summer_cart, "prod-7", "ATS-CAP", 1, SkuFactory.create())

        result = partition_shipments(build_cart_items(cart), self._persisted(), today=TODAY)

        new_ats = next(s for s in result.shipments if s.id == "new-ats")
        assert new_ats.planned_ship_start == date(2025, 5, 1)
        assert new_ats.planned_ship_end == date(2025, 5, 9)

    def test_new_ats_without_existing_ats_uses_default(self, summer_cart):
        persisted = self._persisted()[:1]
        cart = CartFactory.with_line(summer_cart, "prod-7", "ATS-CAP", 1, SkuFactory.create())

        result = partition_shipments(build_cart_items(cart), persisted, today=TODAY)

        new_ats = next(s for s in result.shipments if s.id == "new-ats")
        assert new_ats.item_ids == ["ATS-TEE-L", "ATS-CAP"]
        assert new_ats.planned_ship_start == TODAY

    def test_combined_shipment_bounds_are_rebuilt_from_items(self):
        cart = CartFactory.create(lines=[
            ("p", "SUM-1", 1, SkuFactory.create(**SUMMER)),
            ("p", "FALL-1", 1, SkuFactory.create(**FALL)),
            ("p", "ATS-1", 1, SkuFactory.create()),
        ])
        persisted = [
            PersistedShipmentFactory.create(
                id="950",
                collection_name="Summer + Fall",
                item_skus=["SUM-1", "FALL-1", "ATS-1"],
                planned_ship_start=date(2025, 6, 15),
                planned_ship_end=date(2025, 6, 30),
                is_combined=True,
                original_shipment_ids=["901", "903"],
            ),
        ]

        combined = partition_shipments(build_cart_items(cart), persisted, today=TODAY).shipments[0]

        assert combined.is_combined is True
        assert combined.original_shipment_ids == ["901", "903"]
        assert combined.min_allowed_start == date(2025, 6, 15)
        assert combined.min_allowed_end == date(2025, 7, 31)

    def test_all_items_removed_reports_every_persisted_shipment(self):
        result = partition_shipments([], self._persisted(), today=TODAY)

        assert result.shipments == []
        assert result.removed_shipment_ids == ["901", "902"]

    def test_collection_shipment_without_stored_window_uses_item_window(self, summer_cart):
        persisted = [
            PersistedShipmentFactory.create(
                id="901",
                collection_id=10,
                collection_name="Summer",
                item_skus=["SUM-RED-S", "SUM-RED-M"],
                planned_ship_start=date(2025, 6, 10),
                planned_ship_end=date(2025, 6, 25),
            ),
        ]

        summer = partition_shipments(build_cart_items(summer_cart), persisted, today=TODAY).shipments[0]

        assert summer.id == "901"
        assert summer.min_allowed_start == date(2025, 6, 1)
        assert summer.min_allowed_end == date(2025, 6, 30)
        assert summer.is_unconstrained is False

    def test_ats_shipment_stays_unconstrained(self, summer_cart):
        ats = partition_shipments(build_cart_items(summer_cart), self._persisted(), today=TODAY).shipments[1]

        assert ats.id == "902"
        assert ats.is_unconstrained is True
