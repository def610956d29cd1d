import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from taskflow import db
from taskflow.errors import PersistenceFailure

logger = logging.getLogger(__name__)


@contextmanager
def atomic(description):
    """
    Commit the session when the block succeeds, roll it back otherwise.

    Database errors surface as ``PersistenceFailure``; anything else raised
    in the block propagates unchanged after the rollback.
    """
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to {description}: {e}")
        raise PersistenceFailure(f'Failed to {description}') from e
    except Exception:
        db.session.rollback()
        raise
