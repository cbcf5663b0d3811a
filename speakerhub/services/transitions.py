"""Transition boundary — converts raised domain errors into TransitionResults.

Every public workflow operation is wrapped with ``@transition``. Inside, the
operation raises ``DomainError`` subclasses for business failures and lets
SQLAlchemy errors propagate; the wrapper rolls the session back so a failed
multi-step transition leaves no partial writes, and returns a result the
caller can branch on.
"""
import functools
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from speakerhub.errors import BackendUnavailableError, DomainError, TransitionResult

logger = logging.getLogger(__name__)


def transition(func):
    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs) -> TransitionResult:
        try:
            return TransitionResult.success(func(db, *args, **kwargs))
        except DomainError as exc:
            db.rollback()
            logger.info("%s refused: %s", func.__name__, exc)
            return TransitionResult.failure(exc)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("%s failed against the data store", func.__name__)
            return TransitionResult.failure(BackendUnavailableError())

    return wrapper
