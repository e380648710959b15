"""Database initialization module.

Creates missing tables on startup when ``AUTO_CREATE_SCHEMA`` is enabled.
Production deployments run the Alembic migrations instead.
"""

import logging

from sqlalchemy import Engine

from catalog_api.models import Base

logger = logging.getLogger(__name__)


def init_database_schema(engine: Engine) -> None:
    """Create the catalog tables that do not exist yet.

    Raises:
        SQLAlchemyError: If the DDL cannot be executed.
    """
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
    except Exception:
        logger.exception("Failed to initialize database schema")
        raise
    logger.info("Database schema initialized")
