import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.errors import ServiceError, StoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors():
    """Re-raise SQLAlchemy failures as StoreError, chaining the original."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        raise StoreError(str(e)) from e


@contextmanager
def transaction(db: Session):
    """Run a block as one unit of work: commit on success, roll back on any error."""
    try:
        with store_errors():
            yield db
            db.commit()
    except ServiceError:
        db.rollback()
        raise
