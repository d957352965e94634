"""
Shipment plan API routes.

Stateless endpoints: the client sends the cart snapshot, persisted
shipments (edit mode) and its PlanningState, and receives the recomputed
plan together with the updated state.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.shipment_plan import (
    ShipmentPlan,
    ShipmentSubmission,
    PlanRequest,
    CombineRequest,
    SplitRequest,
    UpdateDatesRequest,
    ClearDatesRequest,
    OverrideRequest,
)
from services.shipment_planner_service import get_shipment_planner_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/shipment-plans", tags=["Shipment Plans"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/preview", response_model=ShipmentPlan)
async def preview_plan(request: PlanRequest):
    """
    Recompute planned shipments for a cart.

    Returns shipments, per-shipment validation errors and the submit gate.
    """
    try:
        return get_shipment_planner_service().plan(request)
    except Exception as e:
        return handle_error(e)


@router.post("/combine", response_model=ShipmentPlan)
async def combine_shipments(request: CombineRequest):
    """
    Combine two or more shipments whose windows overlap.

    Raises:
        422: Combination not allowed
    """
    try:
        return get_shipment_planner_service().combine(request)
    except Exception as e:
        return handle_error(e)


@router.post("/split", response_model=ShipmentPlan)
async def split_shipment(request: SplitRequest):
    """
    Undo a combine.

    Raises:
        404: No such combined shipment
    """
    try:
        return get_shipment_planner_service().split(request)
    except Exception as e:
        return handle_error(e)


@router.post("/dates", response_model=ShipmentPlan)
async def update_shipment_dates(request: UpdateDatesRequest):
    """
    Set the dates of one shipment.

    Out-of-window dates are accepted and reported in validation_errors.

    Raises:
        404: Shipment not in the current plan
    """
    try:
        return get_shipment_planner_service().update_dates(request)
    except Exception as e:
        return handle_error(e)


@router.post("/dates/clear", response_model=ShipmentPlan)
async def clear_shipment_dates(request: ClearDatesRequest):
    """Revert one shipment to its default dates."""
    try:
        return get_shipment_planner_service().clear_dates(request)
    except Exception as e:
        return handle_error(e)


@router.post("/override", response_model=ShipmentPlan)
async def set_override(request: OverrideRequest):
    """Confirm or withdraw submitting despite ship-window violations."""
    try:
        return get_shipment_planner_service().set_override(request)
    except Exception as e:
        return handle_error(e)


@router.post("/submission", response_model=ShipmentSubmission)
async def build_submission(request: PlanRequest):
    """
    Final shipment list for order create/update.

    Raises:
        422: Violations without a confirmed override, inverted date ranges,
             or pre-order items missing a collection
    """
    try:
        return get_shipment_planner_service().build_submission(request)
    except Exception as e:
        return handle_error(e)
