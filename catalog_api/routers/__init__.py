from fastapi import APIRouter

from . import categories, products


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(categories.router)
    router.include_router(products.router)
    return router
