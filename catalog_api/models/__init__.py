from .base import Base
from .category import Category
from .product import Product
from .product_category import ProductCategory

__all__ = [
    "Base",
    "Category",
    "Product",
    "ProductCategory",
]
