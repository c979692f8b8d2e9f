# dairy_ops/services/common/mapping.py
"""
Model-Schema mapping utilities.

Converts ORM rows into response schemas and untrusted payloads into
request schemas, translating pydantic failures into service errors.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ServiceError, ValidationError

TModel = TypeVar("TModel")
TSchema = TypeVar("TSchema", bound=BaseModel)


class MappingError(ServiceError):
    """Raised when model-to-schema conversion fails."""

    def __init__(self, message: str, source_obj: Any = None) -> None:
        super().__init__(message, details={"source_type": type(source_obj).__name__})
        self.source_obj = source_obj


def to_schema(obj: TModel, schema_cls: Type[TSchema]) -> TSchema:
    """
    Convert an ORM model to a Pydantic schema.

    Raises:
        MappingError: If conversion fails or obj is None

    Example:
        >>> subscription = to_schema(db_subscription, SubscriptionRead)
    """
    if obj is None:
        raise MappingError(f"Cannot convert None to {schema_cls.__name__}", source_obj=obj)

    try:
        return schema_cls.model_validate(obj)
    except PydanticValidationError as exc:
        raise MappingError(
            f"Failed to convert {type(obj).__name__} to {schema_cls.__name__}: {exc}",
            source_obj=obj,
        ) from exc


def to_schema_list(objs: Iterable[TModel], schema_cls: Type[TSchema]) -> list[TSchema]:
    return [to_schema(obj, schema_cls) for obj in objs]


def parse_request(
    data: Union[TSchema, Mapping[str, Any]],
    schema_cls: Type[TSchema],
) -> TSchema:
    """
    Validate an inbound payload.

    Already-validated schema instances pass through. The first pydantic
    error becomes a ``ValidationError`` naming the offending field.

    Raises:
        ValidationError: If the payload is invalid
    """
    if isinstance(data, schema_cls):
        return data

    try:
        return schema_cls.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        loc = [str(part) for part in first.get("loc", ()) if part != "__root__"]
        # Report camelCase aliases under the field name.
        aliases = {info.alias: name for name, info in schema_cls.model_fields.items() if info.alias}
        field = aliases.get(loc[0], loc[0]) if loc else None
        reason = first.get("msg", "invalid value")
        if reason.startswith("Value error, "):
            reason = reason[len("Value error, "):]
        message = f"Invalid {field}: {reason}" if field else reason
        raise ValidationError(message, field=field, details={"errors": len(exc.errors())}) from exc
