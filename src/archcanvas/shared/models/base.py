"""
Base models and mixins for ArchCanvas.
"""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field

_ONE_MICROSECOND = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime) -> datetime:
    """Return now, or one microsecond past ``previous`` if the clock has not advanced."""
    now = utc_now()
    if now <= previous:
        return previous + _ONE_MICROSECOND
    return now


class BaseModel(PydanticBaseModel):
    """
    Base model for all ArchCanvas data structures.

    Provides common configuration and utilities.
    """

    model_config = ConfigDict(
        # Allow field population by name or alias
        populate_by_name=True,
        # Validate assignments after object creation
        validate_assignment=True,
        # Use enum values instead of enum names
        use_enum_values=True,
        extra="forbid",
    )


class TimestampMixin(BaseModel):
    """
    Mixin to add timestamp fields to models.
    """
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update timestamp")
