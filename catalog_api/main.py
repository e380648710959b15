import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog_api.core.config import get_settings
from catalog_api.core.database_init import init_database_schema
from catalog_api.core.db import get_engine
from catalog_api.core.logging import configure_logging
from catalog_api.core.middleware import RequestLoggingMiddleware
from catalog_api.routers import get_api_router, health
from catalog_api.services import exceptions as service_exceptions

ERROR_STATUS = {
    service_exceptions.NotFoundError: status.HTTP_404_NOT_FOUND,
    service_exceptions.ConflictError: status.HTTP_409_CONFLICT,
    service_exceptions.ValidationError: status.HTTP_422_UNPROCESSABLE_CONTENT,
    service_exceptions.InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if get_settings().AUTO_CREATE_SCHEMA:
        init_database_schema(get_engine())
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    logger = logging.getLogger("catalog_api.errors")

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Validation error on %s %s detail=%s",
            request.method,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(service_exceptions.ServiceError)
    async def service_exception_handler(request: Request, exc: service_exceptions.ServiceError):
        status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            detail = "Internal server error"
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
            detail = str(exc)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    app.include_router(health.router)
    app.include_router(get_api_router(), prefix=settings.API_PREFIX)

    return app


app = create_app()
