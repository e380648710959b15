import uvicorn

from catalog_api.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "catalog_api.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
