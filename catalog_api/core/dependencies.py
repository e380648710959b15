from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from catalog_api.core.db import get_db_session
from catalog_api.services import CategoryService, ProductService


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)
