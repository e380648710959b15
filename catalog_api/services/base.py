import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_api.core.db import transaction

from . import exceptions

logger = logging.getLogger(__name__)


class BaseService:
    """Shared storage error handling for the catalog services."""

    conflict_message = "Record already exists"

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _read(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except exceptions.ServiceError:
            raise
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s", action)
            raise exceptions.InternalError(f"Failed to {action}") from exc

    @contextmanager
    def _write(self, action: str) -> Generator[None, None, None]:
        """Run the block as one transaction and translate storage errors."""

        try:
            with transaction(self.db):
                yield
        except exceptions.ServiceError:
            raise
        except IntegrityError as exc:
            logger.warning("Constraint rejected %s: %s", action, exc.orig)
            raise self._translate_integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s", action)
            raise exceptions.InternalError(f"Failed to {action}") from exc

    def _translate_integrity_error(self, exc: IntegrityError) -> exceptions.ServiceError:
        message = str(exc.orig).lower()
        if "foreign key" in message:
            return exceptions.ValidationError("Referenced category does not exist")
        if "unique" in message or "duplicate key" in message:
            return exceptions.ConflictError(self.conflict_message)
        return exceptions.InternalError("Constraint violation")
