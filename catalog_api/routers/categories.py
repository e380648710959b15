from fastapi import APIRouter, Depends, Query, Response, status

from catalog_api.core.dependencies import get_category_service
from catalog_api.schemas import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    CategoryWithCount,
    ErrorResponse,
    ProductRead,
)
from catalog_api.services import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("", response_model=list[CategoryWithCount])
def list_categories(
    include_product_count: bool = Query(default=False),
    service: CategoryService = Depends(get_category_service),
):
    return service.list(include_product_count=include_product_count)


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def create_category(
    payload: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
):
    return service.create(name=payload.name, description=payload.description)


@router.get("/{category_id}", response_model=CategoryRead, responses=NOT_FOUND)
def get_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
):
    return service.get(category_id)


@router.put(
    "/{category_id}",
    response_model=CategoryRead,
    responses={**NOT_FOUND, 409: {"model": ErrorResponse}},
)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
):
    updates = payload.model_dump(exclude_unset=True)
    return service.update(category_id, updates)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
def delete_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
):
    service.delete(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{category_id}/products", response_model=list[ProductRead], responses=NOT_FOUND)
def list_category_products(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
):
    return service.list_products(category_id)
