from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from catalog_api.models import Category, Product, ProductCategory
from catalog_api.models.base import utcnow
from catalog_api.schemas import CategoryBrief, ProductPage, ProductRead

from . import exceptions, validation
from .base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * page_size well inside a 64-bit OFFSET
MAX_PAGE = validation.MAX_ID

UPDATABLE_FIELDS = ("name", "description", "price", "sku", "category_ids")


def category_briefs_for(db: Session, product_ids: Iterable[int]) -> dict[int, tuple[CategoryBrief, ...]]:
    """Resolve the categories of each product, ordered by category name."""

    ids = list(product_ids)
    if not ids:
        return {}
    briefs: dict[int, list[CategoryBrief]] = {product_id: [] for product_id in ids}
    rows = (
        db.query(ProductCategory.product_id, Category.id, Category.name)
        .join(Category, Category.id == ProductCategory.category_id)
        .filter(ProductCategory.product_id.in_(ids))
        .order_by(Category.name, Category.id)
        .all()
    )
    for product_id, category_id, category_name in rows:
        briefs[product_id].append(CategoryBrief(id=category_id, name=category_name))
    return {product_id: tuple(items) for product_id, items in briefs.items()}


def serialize_products(db: Session, products: Sequence[Product]) -> list[ProductRead]:
    briefs = category_briefs_for(db, [product.id for product in products])
    return [_serialize_product(product, briefs.get(product.id, ())) for product in products]


def _serialize_product(product: Product, categories: tuple[CategoryBrief, ...]) -> ProductRead:
    return ProductRead(
        id=product.id,
        name=product.name,
        description=product.description,
        price=_stored_price(product),
        sku=product.sku,
        categories=categories,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _stored_price(product: Product) -> Decimal:
    value = product.price
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise exceptions.InternalError(f"Invalid price format for product {product.id}") from exc
    if not price.is_finite():
        raise exceptions.InternalError(f"Invalid price format for product {product.id}")
    return price


def normalize_pagination(page: Optional[int], page_size: Optional[int]) -> tuple[int, int]:
    page = DEFAULT_PAGE if page is None else page
    page_size = DEFAULT_PAGE_SIZE if page_size is None else page_size
    return min(max(page, 1), MAX_PAGE), min(max(page_size, 1), MAX_PAGE_SIZE)


class ProductService(BaseService):
    conflict_message = "Product with this SKU already exists"

    def create(
        self,
        *,
        name: str,
        price: Any,
        category_ids: Optional[Iterable[int]],
        description: Optional[str] = None,
        sku: Optional[str] = None,
    ) -> ProductRead:
        name = validation.require_name(
            name, max_length=validation.PRODUCT_NAME_MAX_LENGTH, label="Product name"
        )
        price = validation.require_positive_price(price)
        sku = validation.optional_sku(sku)
        ids = validation.require_category_ids(category_ids)

        with self._write("create product"):
            self._ensure_categories_exist(ids)
            self._ensure_sku_available(sku)
            product = Product(name=name, description=description, price=price, sku=sku)
            self.db.add(product)
            self.db.flush()
            self._link_categories(product.id, ids)
            result = self._to_read(product)

        logger.info("Created product %s with categories %s", product.id, ids)
        return result

    def get(self, product_id: int) -> ProductRead:
        with self._read("get product"):
            product = self._get_product(product_id)
            return self._to_read(product)

    def list(
        self,
        *,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> ProductPage:
        page, page_size = normalize_pagination(page, page_size)
        if category_id is not None and not validation.is_storable_id(category_id):
            return ProductPage(items=[], total=0, page=page, page_size=page_size)
        with self._read("list products"):
            query = self.db.query(Product)
            if category_id is not None:
                query = query.join(
                    ProductCategory, ProductCategory.product_id == Product.id
                ).filter(ProductCategory.category_id == category_id)

            total = query.count()
            products = (
                query.order_by(Product.id)
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )
            items = serialize_products(self.db, products)
        return ProductPage(items=items, total=total, page=page, page_size=page_size)

    def update(self, product_id: int, data: dict) -> ProductRead:
        validation.reject_unknown_fields(data, UPDATABLE_FIELDS)
        fields = self._clean_fields(data)
        category_ids = data.get("category_ids")
        if category_ids is not None:
            category_ids = validation.require_category_ids(category_ids)

        with self._write("update product"):
            product = self._get_product(product_id)
            if "sku" in fields and fields["sku"] != product.sku:
                self._ensure_sku_available(fields["sku"], exclude_id=product.id)
            if category_ids is not None:
                self._ensure_categories_exist(category_ids)

            for key, value in fields.items():
                setattr(product, key, value)
            product.updated_at = utcnow()

            if category_ids is not None:
                self.db.query(ProductCategory).filter(
                    ProductCategory.product_id == product.id
                ).delete(synchronize_session=False)
                self._link_categories(product.id, category_ids)
            self.db.flush()
            result = self._to_read(product)

        logger.info("Updated product %s fields=%s", product_id, sorted(data))
        return result

    def delete(self, product_id: int) -> None:
        with self._write("delete product"):
            product = self._get_product(product_id)
            self.db.query(ProductCategory).filter(
                ProductCategory.product_id == product.id
            ).delete(synchronize_session=False)
            self.db.delete(product)
        logger.info("Deleted product %s", product_id)

    def _to_read(self, product: Product) -> ProductRead:
        briefs = category_briefs_for(self.db, [product.id])
        return _serialize_product(product, briefs.get(product.id, ()))

    def _get_product(self, product_id: int) -> Product:
        product = None
        if validation.is_storable_id(product_id):
            product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise exceptions.NotFoundError(f"Product with ID {product_id} not found")
        return product

    def _ensure_categories_exist(self, category_ids: list[int]) -> None:
        found = {
            row[0]
            for row in self.db.query(Category.id)
            .filter(Category.id.in_([i for i in category_ids if validation.is_storable_id(i)]))
            .all()
        }
        missing = [category_id for category_id in category_ids if category_id not in found]
        if missing:
            logger.warning("Rejected unknown category ids %s", missing)
            raise exceptions.ValidationError(
                "Categories not found: " + ", ".join(str(category_id) for category_id in missing)
            )

    def _ensure_sku_available(self, sku: Optional[str], exclude_id: Optional[int] = None) -> None:
        if sku is None:
            return
        query = self.db.query(Product.id).filter(Product.sku == sku)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first() is not None:
            logger.warning("Rejected duplicate SKU %r", sku)
            raise exceptions.ConflictError(self.conflict_message)

    def _link_categories(self, product_id: int, category_ids: list[int]) -> None:
        self.db.add_all(
            [ProductCategory(product_id=product_id, category_id=category_id) for category_id in category_ids]
        )
        self.db.flush()

    @staticmethod
    def _clean_fields(data: dict) -> dict:
        fields: dict[str, Any] = {}
        if "name" in data:
            fields["name"] = validation.require_name(
                data["name"], max_length=validation.PRODUCT_NAME_MAX_LENGTH, label="Product name"
            )
        if "description" in data:
            fields["description"] = data["description"]
        if "price" in data:
            fields["price"] = validation.require_positive_price(data["price"])
        if "sku" in data:
            fields["sku"] = validation.optional_sku(data["sku"])
        return fields
