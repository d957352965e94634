"""
Ship window calculations and validation.

Core rules:
- Ship start cannot be earlier than any constraining collection's window start.
- Ship end cannot be later than any constraining collection's window end.
- Ship end must be on or after ship start.

All functions are pure. A window bound that is None is unconstrained on
that side.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from config import settings
from models.ship_window import (
    CollectionWindow,
    DateRange,
    MinimumAllowedDates,
    DateField,
    ShipDateErrorKind,
    ShipDateError,
    ValidationResult,
)


def default_window(today: Optional[date] = None, days: Optional[int] = None) -> DateRange:
    """
    Default ship dates for items with no collection constraint.

    Args:
        today: Reference date (defaults to date.today())
        days: Window length (defaults to settings.ats_default_window_days)

    Returns:
        DateRange from today through today + days
    """
    today = today or date.today()
    if days is None:
        days = settings.ats_default_window_days
    return DateRange(start=today, end=today + timedelta(days=days))


def windows_overlap(a: CollectionWindow, b: CollectionWindow) -> bool:
    """Two windows overlap iff max(starts) <= min(ends)."""
    return overlap([a, b]) is not None or not (a.has_bounds or b.has_bounds)


def overlap(windows: Iterable[CollectionWindow]) -> Optional[DateRange]:
    """
    Intersection of all windows.

    Missing bounds are ignored, so an unconstrained window never narrows
    the result.

    Returns:
        DateRange of the common interval (a side is None when no window
        bounds it), or None if the intersection is empty or no window has
        any bound.
    """
    windows = list(windows)
    starts = [w.ship_window_start for w in windows if w.ship_window_start is not None]
    ends = [w.ship_window_end for w in windows if w.ship_window_end is not None]

    if not starts and not ends:
        return None

    start = max(starts) if starts else None
    end = min(ends) if ends else None

    if start is not None and end is not None and start > end:
        return None

    return DateRange(start=start, end=end)


def minimum_allowed_dates(windows: Iterable[CollectionWindow]) -> MinimumAllowedDates:
    """
    Most restrictive lower bounds across windows.

    Returns the LATEST start and the LATEST end. Unlike overlap() this
    always has a value as long as one window has a bound.
    """
    windows = list(windows)
    starts = [w.ship_window_start for w in windows if w.ship_window_start is not None]
    ends = [w.ship_window_end for w in windows if w.ship_window_end is not None]

    return MinimumAllowedDates(
        min_start=max(starts) if starts else None,
        min_end=max(ends) if ends else None,
    )


def validate_ship_dates(
    start: date,
    end: date,
    constraints: Iterable[CollectionWindow]
) -> ValidationResult:
    """
    Validate proposed ship dates against collection windows.

    An empty constraint list (ATS items) only checks start <= end.

    Args:
        start: Proposed ship start
        end: Proposed ship end
        constraints: Windows of every collection the shipment carries

    Returns:
        ValidationResult with field-tagged errors and warnings
    """
    constraints = list(constraints)
    errors: list[ShipDateError] = []
    warnings: list[str] = []

    if end < start:
        errors.append(ShipDateError(
            field=DateField.END,
            kind=ShipDateErrorKind.INVERTED_RANGE,
            message="Ship end date must be on or after start date",
            boundary_date=start,
        ))

    if not constraints:
        warnings.append("No collections to validate against")
        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    for window in constraints:
        if window.ship_window_start is not None:
            if start < window.ship_window_start:
                errors.append(ShipDateError(
                    field=DateField.START,
                    kind=ShipDateErrorKind.START_BEFORE_WINDOW,
                    message=f"Cannot be before {window.name}'s ship window",
                    collection_name=window.name,
                    boundary_date=window.ship_window_start,
                ))
        else:
            warnings.append(f"{window.name} has no ship window start date")

        if window.ship_window_end is not None:
            if end > window.ship_window_end:
                errors.append(ShipDateError(
                    field=DateField.END,
                    kind=ShipDateErrorKind.END_AFTER_WINDOW,
                    message=f"Cannot be after {window.name}'s ship window end",
                    collection_name=window.name,
                    boundary_date=window.ship_window_end,
                ))
        else:
            warnings.append(f"{window.name} has no ship window end date")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
