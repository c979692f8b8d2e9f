# --- File: dairy_ops/schemas/common/base.py ---
"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "BaseSchema",
    "TimestampMixin",
    "UUIDMixin",
    "BaseDBSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "BaseResponseSchema",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All service-facing schemas inherit from this so ORM rows can be
    validated directly with ``model_validate``.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        # Keep enums as Enum instances; callers can still use `.value`.
        use_enum_values=False,
        arbitrary_types_allowed=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class UUIDMixin(BaseModel):
    """Mixin for UUID primary key."""

    id: UUID = Field(..., description="Unique identifier")


class BaseDBSchema(BaseSchema, UUIDMixin, TimestampMixin):
    """Base schema for database entities with ID and timestamps."""
    pass


class BaseCreateSchema(BaseSchema):
    """
    Base schema for create operations.

    Request payloads arrive from clients in camelCase (``productId``);
    both spellings are accepted.
    """

    model_config = ConfigDict(alias_generator=to_camel)


class BaseUpdateSchema(BaseCreateSchema):
    """
    Base schema for partial updates.

    Subclasses declare every field optional; services apply only the
    fields present in ``model_fields_set``.
    """
    pass


class BaseResponseSchema(BaseDBSchema):
    """Base schema for service responses."""
    pass
