"""
Order API routes.

Only the edit-mode read needed by shipment planning lives here.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.planned_shipment import PersistedShipment
from services.planned_shipment_service import get_planned_shipment_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
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


@router.get("/{order_id}/planned-shipments", response_model=list[PersistedShipment])
async def get_planned_shipments(order_id: str):
    """
    Planned shipments saved with an order.

    Feed these back as persisted_shipments when editing the order.
    """
    try:
        return get_planned_shipment_service().get_for_order(order_id)
    except Exception as e:
        return handle_error(e)
