"""
Custom exception classes for the application.

Ship-date violations are not exceptions: they are returned as
ShipDateError values by the validator. These classes cover invalid
requests (bad combine/split actions, blocked submissions, missing
records) and infrastructure failures.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        code: Error code (e.g., "SHIPMENT_GROUP_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# SHIPMENT PLANNING ERRORS
# ===================

class ShipmentCombineError(ValidationError):
    """Requested combine action is not allowed."""

    def __init__(self, reason: str, shipment_ids: list[str]):
        super().__init__(
            code="SHIPMENT_COMBINE_NOT_ALLOWED",
            message=reason,
            details={"shipment_ids": shipment_ids}
        )


class ShipmentGroupNotFoundError(NotFoundError):
    """No active grouping for the given combined shipment id."""

    def __init__(self, combined_id: str):
        super().__init__(
            resource="Shipment group",
            identifier=combined_id,
            code="SHIPMENT_GROUP_NOT_FOUND"
        )


class PlannedShipmentNotFoundError(NotFoundError):
    """Shipment id not present in the current plan."""

    def __init__(self, shipment_id: str):
        super().__init__(
            resource="Planned shipment",
            identifier=shipment_id,
            code="PLANNED_SHIPMENT_NOT_FOUND"
        )


class ShipmentSubmissionBlockedError(ValidationError):
    """Order cannot be submitted with the current shipment plan."""

    def __init__(
        self,
        errors: dict[str, dict],
        missing_collection_skus: Optional[list[str]] = None,
        blocking: bool = False
    ):
        if missing_collection_skus:
            message = f"{len(missing_collection_skus)} pre-order items have no collection"
        elif blocking:
            message = "Ship end date must be on or after start date"
        else:
            message = f"{len(errors)} shipments have ship-window violations"
        super().__init__(
            code="SHIPMENT_SUBMISSION_BLOCKED",
            message=message,
            details={
                "errors": errors,
                "missing_collection_skus": missing_collection_skus or [],
                "override_allowed": not blocking and not missing_collection_skus,
            }
        )
