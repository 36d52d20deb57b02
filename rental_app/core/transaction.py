import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError

from .errors import DomainError, PersistenceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transition(db, name: str):
    """Stage every write of one state transition and commit it once.

    Any failure rolls the whole session back. Persistence failures are
    re-raised as PersistenceError; domain errors propagate unchanged.
    """
    try:
        yield
        await db.commit()
    except DomainError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("%s failed and was rolled back", name)
        raise PersistenceError(
            f"Could not complete {name}. No changes were saved.",
            details={"operation": name},
        ) from e
