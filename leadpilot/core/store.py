"""
leadpilot/core/store.py

Thin record store over a SQLAlchemy session. The agent, the batch runner and
the ingestion pipeline only talk to storage through this class, so every
database failure reaches them as a PersistenceError.

Filters are plain SQLAlchemy column expressions:

    store.find_one(Lead, Lead.email == "a@b.com")
    store.find_many(Lead, Lead.stage.notin_(TERMINAL), order_by=[Lead.updated_at.desc()], limit=5)

Writes are flushed immediately (so ids exist) but only committed by
`transaction()`.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leadpilot.core.errors import NotFound, PersistenceError

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # WRITES
    # ------------------------------------------------------------------

    def create(self, model, **fields):
        record = model(**fields)
        try:
            self.db.add(record)
            self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create {model.__tablename__}: {e}") from e
        return record

    def update(self, record, **fields):
        for key, value in fields.items():
            setattr(record, key, value)
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update {record.__tablename__} {record.id}: {e}") from e
        return record

    # ------------------------------------------------------------------
    # READS
    # ------------------------------------------------------------------

    def get(self, model, record_id):
        try:
            record = self.db.get(model, record_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load {model.__tablename__} {record_id}: {e}") from e
        if record is None:
            raise NotFound(f"{model.__tablename__} {record_id} not found")
        return record

    def find_one(self, model, *criteria):
        try:
            return self.db.query(model).filter(*criteria).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Lookup on {model.__tablename__} failed: {e}") from e

    def find_many(self, model, *criteria, order_by=None, limit=None, offset=0):
        try:
            query = self.db.query(model).filter(*criteria)
            if order_by is not None:
                query = query.order_by(*order_by)
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Query on {model.__tablename__} failed: {e}") from e

    def count(self, model) -> int:
        try:
            return self.db.query(func.count(model.id)).scalar() or 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Count on {model.__tablename__} failed: {e}") from e

    # ------------------------------------------------------------------
    # TRANSACTIONS
    # ------------------------------------------------------------------

    def rollback(self):
        """Discards uncommitted writes so the session is usable again."""
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Rollback failed: {e}") from e

    @contextmanager
    def transaction(self):
        """
        Commits everything written inside the block, or rolls all of it back.
        Database errors come out as PersistenceError; anything else is re-raised as is.
        """
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Transaction failed: {e}") from e
        except Exception:
            self.db.rollback()
            raise
