from dairy_ops.schemas.common.base import (
    BaseCreateSchema,
    BaseDBSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)

__all__ = [
    "BaseCreateSchema",
    "BaseDBSchema",
    "BaseResponseSchema",
    "BaseSchema",
    "BaseUpdateSchema",
]
