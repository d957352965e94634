"""
Shipment planner service.

Ties the engine together: cart snapshot -> cart items -> partition ->
grouping overlay -> combinability -> validation -> submission gate.

compute_shipments() is a pure function: identical cart, persisted
shipments, overrides and groupings always yield identical shipments.
User actions never mutate the incoming PlanningState; they return a new
plan carrying the new state.
"""

from datetime import date
from typing import Optional

import structlog

from models.cart import CartItem
from models.planned_shipment import (
    PlannedShipment,
    PersistedShipment,
    PlanningState,
    DateOverride,
)
from models.shipment_plan import (
    ShipmentPlan,
    ShipmentSubmission,
    SubmittedShipment,
    PlanRequest,
    CombineRequest,
    SplitRequest,
    UpdateDatesRequest,
    ClearDatesRequest,
    OverrideRequest,
)
from services.cart_builder import build_cart_items, order_total, items_missing_collection
from services.shipment_partitioner import partition_shipments, PartitionResult
from services import shipment_grouping
from services.combinability import annotate_combinability
from services.shipment_validation import (
    validate_shipments,
    can_submit,
    reconcile_override,
)
from exceptions import PlannedShipmentNotFoundError, ShipmentSubmissionBlockedError

logger = structlog.get_logger(__name__)


def compute_shipments(
    items: list[CartItem],
    persisted: Optional[list[PersistedShipment]] = None,
    overrides: Optional[dict[str, DateOverride]] = None,
    groupings: Optional[dict[str, list[str]]] = None,
    today: Optional[date] = None
) -> PartitionResult:
    """
    Compute the final planned shipments.

    Args:
        items: Current cart lines
        persisted: Shipments saved with the order being edited (edit mode)
        overrides: User dates keyed by shipment id
        groupings: Combined id -> original shipment ids
        today: Reference date for default ATS windows

    Returns:
        PartitionResult whose shipments are sorted by planned start
    """
    partition = partition_shipments(items, persisted, overrides, today)
    grouped = shipment_grouping.apply_groupings(
        partition.shipments,
        groupings or {},
        items,
        overrides
    )
    annotated = annotate_combinability(grouped)
    return PartitionResult(
        shipments=sorted(annotated, key=lambda s: s.planned_ship_start),
        removed_shipment_ids=partition.removed_shipment_ids,
    )


class ShipmentPlannerService:
    """
    Shipment planning use cases.

    Stateless: every call receives the cart snapshot, persisted shipments
    and planning state, and returns a recomputed ShipmentPlan.
    """

    # ===================
    # PLAN
    # ===================

    def plan(
        self,
        request: PlanRequest,
        state: Optional[PlanningState] = None,
        today: Optional[date] = None
    ) -> ShipmentPlan:
        """
        Recompute the plan for a cart.

        Args:
            request: Cart, persisted shipments and current state
            state: State to use instead of request.state (after an action)
            today: Reference date for default ATS windows

        Returns:
            ShipmentPlan with validation results and reconciled state
        """
        state = state or request.state
        items = build_cart_items(request.cart)
        result = compute_shipments(
            items,
            request.persisted_shipments,
            state.overrides,
            state.groupings,
            today
        )

        summary = validate_shipments(result.shipments, items)
        state = reconcile_override(state, summary)
        missing = items_missing_collection(items, request.cart.order_type)

        return ShipmentPlan(
            shipments=result.shipments,
            validation_errors=summary.errors,
            has_shipment_validation_errors=summary.has_errors,
            has_blocking_errors=summary.has_blocking_errors,
            items_missing_collection=missing,
            can_submit=can_submit(summary, state.override_confirmed, missing),
            removed_shipment_ids=result.removed_shipment_ids,
            order_total=order_total(items),
            item_count=sum(i.quantity for i in items),
            state=state,
        )

    def _current_shipments(
        self,
        request: PlanRequest,
        today: Optional[date] = None
    ) -> list[PlannedShipment]:
        items = build_cart_items(request.cart)
        return compute_shipments(
            items,
            request.persisted_shipments,
            request.state.overrides,
            request.state.groupings,
            today
        ).shipments

    # ===================
    # USER ACTIONS
    # ===================

    def update_dates(self, request: UpdateDatesRequest, today: Optional[date] = None) -> ShipmentPlan:
        """
        Store the user's dates for a shipment.

        Raises:
            PlannedShipmentNotFoundError: Shipment not in the current plan
        """
        shipments = self._current_shipments(request, today)
        if request.shipment_id not in {s.id for s in shipments}:
            raise PlannedShipmentNotFoundError(request.shipment_id)

        overrides = {
            **request.state.overrides,
            request.shipment_id: DateOverride(start=request.start, end=request.end),
        }
        logger.info(
            "shipment_dates_updated",
            shipment_id=request.shipment_id,
            start=request.start.isoformat(),
            end=request.end.isoformat(),
        )
        return self.plan(request, request.state.model_copy(update={"overrides": overrides}), today)

    def clear_dates(self, request: ClearDatesRequest, today: Optional[date] = None) -> ShipmentPlan:
        """Drop the user's dates for a shipment; defaults apply again."""
        overrides = {
            k: v for k, v in request.state.overrides.items()
            if k != request.shipment_id
        }
        logger.info("shipment_dates_cleared", shipment_id=request.shipment_id)
        return self.plan(request, request.state.model_copy(update={"overrides": overrides}), today)

    def combine(self, request: CombineRequest, today: Optional[date] = None) -> ShipmentPlan:
        """
        Combine shipments.

        Raises:
            ShipmentCombineError: Combination not allowed
        """
        shipments = self._current_shipments(request, today)
        state, _ = shipment_grouping.combine(request.state, shipments, request.shipment_ids)
        return self.plan(request, state, today)

    def split(self, request: SplitRequest, today: Optional[date] = None) -> ShipmentPlan:
        """
        Split a combined shipment.

        Raises:
            ShipmentGroupNotFoundError: No such grouping
        """
        state = shipment_grouping.split(request.state, request.combined_id)
        return self.plan(request, state, today)

    def set_override(self, request: OverrideRequest, today: Optional[date] = None) -> ShipmentPlan:
        """Confirm or withdraw the override; reset again if nothing is wrong."""
        logger.info("shipment_override_set", confirmed=request.confirmed)
        state = request.state.model_copy(update={"override_confirmed": request.confirmed})
        return self.plan(request, state, today)

    # ===================
    # SUBMISSION
    # ===================

    def build_submission(self, request: PlanRequest, today: Optional[date] = None) -> ShipmentSubmission:
        """
        Final shipment list for order create/update.

        Raises:
            ShipmentSubmissionBlockedError: Errors without a valid override,
                or pre-order items missing a collection
        """
        plan = self.plan(request, today=today)

        if not plan.can_submit:
            logger.warning(
                "shipment_submission_blocked",
                errors=list(plan.validation_errors),
                missing_collection=plan.items_missing_collection,
                blocking=plan.has_blocking_errors,
            )
            raise ShipmentSubmissionBlockedError(
                errors={k: v.model_dump() for k, v in plan.validation_errors.items()},
                missing_collection_skus=plan.items_missing_collection,
                blocking=plan.has_blocking_errors,
            )

        allow_override = plan.has_shipment_validation_errors and plan.state.override_confirmed
        shipments = [
            SubmittedShipment(**s.model_dump(), allow_override=allow_override)
            for s in plan.shipments
        ]

        logger.info(
            "shipment_submission_built",
            shipment_count=len(shipments),
            removed=plan.removed_shipment_ids,
            allow_override=allow_override,
        )
        return ShipmentSubmission(
            shipments=shipments,
            removed_shipment_ids=plan.removed_shipment_ids,
            allow_override=allow_override,
        )


# Singleton instance
_shipment_planner_service: Optional[ShipmentPlannerService] = None


def get_shipment_planner_service() -> ShipmentPlannerService:
    """Get or create ShipmentPlannerService instance."""
    global _shipment_planner_service
    if _shipment_planner_service is None:
        _shipment_planner_service = ShipmentPlannerService()
    return _shipment_planner_service
