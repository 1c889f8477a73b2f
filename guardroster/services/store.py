"""Wraps each manager's single store call: commit on success, typed error on failure."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from guardroster.core.errors import Conflict, DependencyFailure

logger = logging.getLogger(__name__)


@contextmanager
def store_call(
    db: Session,
    action: str,
    *,
    commit: bool = False,
    refresh: object | None = None,
    conflict_message: str | None = None,
) -> Iterator[None]:
    """
    Run the body against db, optionally commit, then reload `refresh` from the store.
    Any SQLAlchemyError rolls back and becomes DependencyFailure; an IntegrityError
    becomes Conflict when conflict_message is set.
    """
    try:
        yield
        if commit:
            db.commit()
        if refresh is not None:
            db.refresh(refresh)
    except IntegrityError as e:
        db.rollback()
        if conflict_message is not None:
            raise Conflict(conflict_message) from e
        logger.error("Store integrity error", extra={"action": action, "error": str(e)[:200]})
        raise DependencyFailure(f"Could not {action}.") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store call failed", extra={"action": action, "error": str(e)[:200]})
        raise DependencyFailure(f"Could not {action}.") from e
