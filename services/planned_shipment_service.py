"""
Planned shipment loader.

Reads the shipments saved with an existing order so the planner can
reconcile them with the edited cart. Read-only: order create/update owns
writes.
"""

from datetime import date
from typing import Optional
import structlog

from config import get_supabase_client
from models.planned_shipment import PersistedShipment
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


def _to_date(value) -> Optional[date]:
    """Stored values may be dates or ISO strings (date or timestamp)."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class PlannedShipmentService:
    """
    Persisted planned shipment access.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "planned_shipments"
        self.items_table = "customer_order_items"

    def get_for_order(self, order_id: str) -> list[PersistedShipment]:
        """
        Load the planned shipments of an order with their item SKUs.

        Args:
            order_id: Order id

        Returns:
            Persisted shipments in stored order (empty if none)

        Raises:
            DatabaseError: If a query fails or a stored row is malformed
        """
        logger.info("getting_planned_shipments", order_id=order_id)

        try:
            shipments_result = (
                self.db.table(self.table)
                .select("*")
                .eq("order_id", order_id)
                .order("id")
                .execute()
            )
            if not shipments_result.data:
                return []

            items_result = (
                self.db.table(self.items_table)
                .select("sku, planned_shipment_id")
                .eq("order_id", order_id)
                .execute()
            )

            skus_by_shipment: dict[str, list[str]] = {}
            for row in items_result.data:
                shipment_id = row.get("planned_shipment_id")
                if shipment_id is None:
                    continue
                skus_by_shipment.setdefault(str(shipment_id), []).append(row["sku"])

            # Malformed rows (e.g. missing dates) are reported as DB errors too
            shipments = [
                self._row_to_shipment(row, skus_by_shipment.get(str(row["id"]), []))
                for row in shipments_result.data
            ]

        except Exception as e:
            logger.error(
                "get_planned_shipments_failed",
                order_id=order_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        logger.info(
            "planned_shipments_retrieved",
            order_id=order_id,
            count=len(shipments)
        )
        return shipments

    def _row_to_shipment(self, row: dict, item_skus: list[str]) -> PersistedShipment:
        """Convert database row to PersistedShipment."""
        return PersistedShipment(
            id=str(row["id"]),
            collection_id=row.get("collection_id"),
            collection_name=row.get("collection_name"),
            item_skus=item_skus,
            planned_ship_start=_to_date(row["planned_ship_start"]),
            planned_ship_end=_to_date(row["planned_ship_end"]),
            ship_window_start=_to_date(row.get("ship_window_start")),
            ship_window_end=_to_date(row.get("ship_window_end")),
            is_combined=bool(row.get("is_combined", False)),
            original_shipment_ids=[str(i) for i in row.get("original_shipment_ids") or []],
        )


# Singleton instance
_planned_shipment_service: Optional[PlannedShipmentService] = None


def get_planned_shipment_service() -> PlannedShipmentService:
    """Get or create PlannedShipmentService instance."""
    global _planned_shipment_service
    if _planned_shipment_service is None:
        _planned_shipment_service = PlannedShipmentService()
    return _planned_shipment_service
