"""
Ship window schemas.

A ship window is the [start, end] date interval in which a collection's
items may ship. Either bound may be missing, in which case that side is
unconstrained.
"""

from pydantic import Field, model_validator
from typing import Optional
from enum import Enum
from datetime import date

from models.base import BaseSchema


class CollectionWindow(BaseSchema):
    """Named ship window of one collection."""

    id: int = 0
    name: str = ""
    ship_window_start: Optional[date] = None
    ship_window_end: Optional[date] = None

    @property
    def has_bounds(self) -> bool:
        return self.ship_window_start is not None or self.ship_window_end is not None


class DateRange(BaseSchema):
    """A start/end pair; a None bound means "not determined"."""

    start: Optional[date] = None
    end: Optional[date] = None


class MinimumAllowedDates(BaseSchema):
    """Most restrictive lower bounds across a set of windows."""

    min_start: Optional[date] = None
    min_end: Optional[date] = None


class DateField(str, Enum):
    """Which date input an error belongs to."""
    START = "start"
    END = "end"


class ShipDateErrorKind(str, Enum):
    """Kinds of ship-date violations."""
    START_BEFORE_WINDOW = "START_BEFORE_WINDOW"
    END_AFTER_WINDOW = "END_AFTER_WINDOW"
    INVERTED_RANGE = "INVERTED_RANGE"


# Kinds the user may knowingly submit anyway.
OVERRIDABLE_ERROR_KINDS = frozenset({
    ShipDateErrorKind.START_BEFORE_WINDOW,
    ShipDateErrorKind.END_AFTER_WINDOW,
})


class ShipDateError(BaseSchema):
    """One field-level ship-date violation."""

    field: DateField
    kind: ShipDateErrorKind
    message: str
    collection_name: str = ""
    boundary_date: date = Field(..., description="Date the offending value was compared against")

    @property
    def overridable(self) -> bool:
        return self.kind in OVERRIDABLE_ERROR_KINDS


class ValidationResult(BaseSchema):
    """Outcome of validating one start/end pair."""

    valid: bool
    errors: list[ShipDateError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def first_error(self, field: DateField) -> Optional[ShipDateError]:
        return next((e for e in self.errors if e.field == field), None)


# ===================
# API SCHEMAS
# ===================

class ValidateDatesRequest(BaseSchema):
    """Validate a proposed start/end against collection windows."""

    start: date
    end: date
    collections: list[CollectionWindow] = Field(default_factory=list)


class OverlapRequest(BaseSchema):
    """Compute the common window of several collections."""

    collections: list[CollectionWindow] = Field(..., min_length=1)

    @model_validator(mode="after")
    def at_least_one_bound(self) -> "OverlapRequest":
        if not any(c.has_bounds for c in self.collections):
            raise ValueError("At least one collection must have a ship window")
        return self


class OverlapResponse(BaseSchema):
    """Intersection and most-restrictive bounds of several windows."""

    overlap: Optional[DateRange] = None
    minimum: MinimumAllowedDates
    overlapping: bool
