"""FastAPI dependency injection: database sessions and the notification job."""
from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from loop_notifications.db.session import get_session_factory
from loop_notifications.notification.helper import Helper, build_helper


def get_db() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_helper(db: Session = Depends(get_db)) -> Helper:
    """Return a notification Helper bound to the current DB session."""
    return build_helper(db)
