import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from semiwallet.errors import UnexpectedError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session):
    """
    Commit everything done inside the block exactly once.

    Any exception rolls the whole block back. Database errors, including a
    failed commit, surface as UnexpectedError; everything else propagates
    unchanged.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Transaction rolled back", extra={"error": str(exc)}, exc_info=True)
        raise UnexpectedError("cannot commit transaction", exc) from exc
    except Exception:
        session.rollback()
        raise
