"""Common schemas and utilities shared across modules."""

from .schemas import (
    BaseResponse,
    ORMModel,
    PaginatedResponse,
    PaginationParams,
    StatusCounts,
    pagination_params,
)

__all__ = [
    "BaseResponse",
    "ORMModel",
    "PaginatedResponse",
    "PaginationParams",
    "StatusCounts",
    "pagination_params",
]
