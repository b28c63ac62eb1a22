"""Shared base for SQLAlchemy-backed repositories."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session


class BaseService:
    """Holds the request session. Repositories built on the same session share
    one unit of work, committed by whichever of them opens ``transaction()``."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit once when the block completes; roll back everything if it raises."""
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
