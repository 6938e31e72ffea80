"""Base repository bound to one SQLAlchemy session."""

from sqlalchemy.orm import Session


class BaseRepository:
    """
    Base class for all repositories.

    Repositories never perform authorization checks and never commit on their own;
    the service that owns the unit of work calls commit() or rollback().
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def commit(self) -> None:
        self._db.commit()

    def rollback(self) -> None:
        self._db.rollback()
