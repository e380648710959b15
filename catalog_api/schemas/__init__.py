from .catalog import (
    CategoryBrief,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    CategoryWithCount,
    ProductCreate,
    ProductPage,
    ProductRead,
    ProductUpdate,
)
from .common import ErrorResponse, HealthStatus

__all__ = [
    "CategoryBrief",
    "CategoryCreate",
    "CategoryRead",
    "CategoryUpdate",
    "CategoryWithCount",
    "ErrorResponse",
    "HealthStatus",
    "ProductCreate",
    "ProductPage",
    "ProductRead",
    "ProductUpdate",
]
