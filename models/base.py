"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM/row objects (from_attributes)

    Engine code never assigns to fields of an input schema; derived
    values are produced with model_copy(update=...).
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )
