"""
Ship window API routes.

Thin wrappers over the ship window calculations, used by date pickers
to validate as the user types.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from models.ship_window import (
    DateRange,
    ValidationResult,
    ValidateDatesRequest,
    OverlapRequest,
    OverlapResponse,
)
from services.ship_window import (
    default_window,
    overlap,
    minimum_allowed_dates,
    validate_ship_dates,
)

router = APIRouter(prefix="/api/ship-windows", tags=["Ship Windows"])


@router.get("/default", response_model=DateRange)
async def get_default_window(
    today: Optional[date] = Query(None, description="Reference date (defaults to today)")
):
    """Default ship window for ATS items."""
    return default_window(today)


@router.post("/validate", response_model=ValidationResult)
async def validate_dates(request: ValidateDatesRequest):
    """Validate proposed ship dates against collection windows."""
    return validate_ship_dates(request.start, request.end, request.collections)


@router.post("/overlap", response_model=OverlapResponse)
async def get_overlap(request: OverlapRequest):
    """Common window and most restrictive bounds of several collections."""
    common = overlap(request.collections)
    return OverlapResponse(
        overlap=common,
        minimum=minimum_allowed_dates(request.collections),
        overlapping=common is not None,
    )
