from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import distinct, func

from catalog_api.models import Category, Product, ProductCategory
from catalog_api.models.base import utcnow
from catalog_api.schemas import CategoryRead, CategoryWithCount, ProductRead

from . import exceptions, validation
from .base import BaseService
from .product_service import serialize_products

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description")


class CategoryService(BaseService):
    conflict_message = "Category with this name already exists"

    def create(self, *, name: str, description: Optional[str] = None) -> CategoryRead:
        name = validation.require_name(
            name, max_length=validation.CATEGORY_NAME_MAX_LENGTH, label="Category name"
        )
        with self._write("create category"):
            self._ensure_name_available(name)
            category = Category(name=name, description=description)
            self.db.add(category)
            self.db.flush()
        logger.info("Created category %s (%s)", category.id, name)
        return CategoryRead.model_validate(category)

    def get(self, category_id: int) -> CategoryRead:
        with self._read("get category"):
            return CategoryRead.model_validate(self._get_category(category_id))

    def list(self, *, include_product_count: bool = False) -> list[CategoryWithCount]:
        with self._read("list categories"):
            if not include_product_count:
                categories = self.db.query(Category).order_by(Category.name).all()
                return [CategoryWithCount.model_validate(category) for category in categories]

            rows = (
                self.db.query(Category, func.count(distinct(ProductCategory.product_id)))
                .outerjoin(ProductCategory, ProductCategory.category_id == Category.id)
                .group_by(Category.id)
                .order_by(Category.name)
                .all()
            )
        return [
            CategoryWithCount(
                id=category.id,
                name=category.name,
                description=category.description,
                created_at=category.created_at,
                updated_at=category.updated_at,
                product_count=count or 0,
            )
            for category, count in rows
        ]

    def update(self, category_id: int, data: dict) -> CategoryRead:
        validation.reject_unknown_fields(data, UPDATABLE_FIELDS)
        if "name" in data:
            validation.require_name(
                data["name"], max_length=validation.CATEGORY_NAME_MAX_LENGTH, label="Category name"
            )

        with self._write("update category"):
            category = self._get_category(category_id)
            if "name" in data and data["name"] != category.name:
                self._ensure_name_available(data["name"], exclude_id=category.id)
            for key, value in data.items():
                setattr(category, key, value)
            category.updated_at = utcnow()
            self.db.flush()
        logger.info("Updated category %s fields=%s", category_id, sorted(data))
        return CategoryRead.model_validate(category)

    def delete(self, category_id: int) -> None:
        with self._write("delete category"):
            category = self._get_category(category_id)
            removed = (
                self.db.query(ProductCategory)
                .filter(ProductCategory.category_id == category.id)
                .delete(synchronize_session=False)
            )
            self.db.delete(category)
        logger.info("Deleted category %s and %s product links", category_id, removed)

    def list_products(self, category_id: int) -> list[ProductRead]:
        with self._read("list category products"):
            self._get_category(category_id)
            products = (
                self.db.query(Product)
                .join(ProductCategory, ProductCategory.product_id == Product.id)
                .filter(ProductCategory.category_id == category_id)
                .order_by(Product.id)
                .all()
            )
            return serialize_products(self.db, products)

    def _get_category(self, category_id: int) -> Category:
        category = None
        if validation.is_storable_id(category_id):
            category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise exceptions.NotFoundError(f"Category with ID {category_id} not found")
        return category

    def _ensure_name_available(self, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Category.id).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first() is not None:
            logger.warning("Rejected duplicate category name %r", name)
            raise exceptions.ConflictError(self.conflict_message)
