from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from catalog_api.core.dependencies import get_product_service
from catalog_api.schemas import ErrorResponse, ProductCreate, ProductPage, ProductRead, ProductUpdate
from catalog_api.services import ProductService

router = APIRouter(prefix="/products", tags=["products"])

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("", response_model=ProductPage)
def list_products(
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None),
    category_id: Optional[int] = Query(default=None),
    service: ProductService = Depends(get_product_service),
):
    return service.list(page=page, page_size=page_size, category_id=category_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_product(
    payload: ProductCreate,
    service: ProductService = Depends(get_product_service),
):
    return service.create(
        name=payload.name,
        description=payload.description,
        price=payload.price,
        sku=payload.sku,
        category_ids=payload.category_ids,
    )


@router.get("/{product_id}", response_model=ProductRead, responses=NOT_FOUND)
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
):
    return service.get(product_id)


@router.put(
    "/{product_id}",
    response_model=ProductRead,
    responses={**NOT_FOUND, 409: {"model": ErrorResponse}},
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    updates = payload.model_dump(exclude_unset=True)
    return service.update(product_id, updates)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
):
    service.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
