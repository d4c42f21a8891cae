"""Persistence seam for schedule records.

SchedulingService depends only on the ScheduleStore protocol.
SqlScheduleStore implements it on the SQLAlchemy models, opening one
session per operation so every call is its own transaction.
"""
from contextlib import contextmanager
from datetime import date
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from vocab_scheduler import crud
from vocab_scheduler.errors import ConcurrentUpdateError, NotFoundError, StoreError
from vocab_scheduler.models import ReviewLog, ScheduleRecord


class ScheduleStore(Protocol):
    """What the scheduler needs from a record store"""

    def find_one(self, user_id: int, item_id: int, track: str) -> Optional[ScheduleRecord]:
        ...

    def insert_if_absent(self, record: ScheduleRecord) -> Optional[ScheduleRecord]:
        ...

    def update(self, record: ScheduleRecord, changes: dict, log_entry: Optional[ReviewLog] = None) -> ScheduleRecord:
        ...

    def delete_reviewed(self, record: ScheduleRecord, log_entry: Optional[ReviewLog] = None) -> None:
        ...

    def delete(self, user_id: int, item_id: int, track: str) -> bool:
        ...

    def list_where(self, user_id: int, track: str, due_by: Optional[date] = None) -> List[ScheduleRecord]:
        ...

    def list_reviews(self, user_id: int, track: Optional[str] = None, limit: int = 50) -> List[ReviewLog]:
        ...


class SqlScheduleStore:
    """ScheduleStore backed by a SQLAlchemy session factory"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    @contextmanager
    def _session(self):
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(str(e)) from e
        finally:
            db.close()

    def find_one(self, user_id: int, item_id: int, track: str) -> Optional[ScheduleRecord]:
        with self._session() as db:
            return crud.get_record(db, user_id, item_id, track)

    def insert_if_absent(self, record: ScheduleRecord) -> Optional[ScheduleRecord]:
        """Insert a record; None means one already existed for its key"""
        with self._session() as db:
            return crud.insert_record(db, record)

    def update(self, record: ScheduleRecord, changes: dict, log_entry: Optional[ReviewLog] = None) -> ScheduleRecord:
        with self._session() as db:
            matched = crud.apply_review(db, record.id, record.version, changes, log_entry)
            current = crud.get_record(db, record.user_id, record.item_id, record.track)
            if not matched:
                self._raise_lost_write(record, current)
            return current

    def delete_reviewed(self, record: ScheduleRecord, log_entry: Optional[ReviewLog] = None) -> None:
        """Delete a record that was just reviewed, if nobody wrote it since"""
        with self._session() as db:
            if not crud.apply_review(db, record.id, record.version, {}, log_entry, remove=True):
                current = crud.get_record(db, record.user_id, record.item_id, record.track)
                self._raise_lost_write(record, current)

    def delete(self, user_id: int, item_id: int, track: str) -> bool:
        with self._session() as db:
            return crud.delete_record(db, user_id, item_id, track) > 0

    def list_where(self, user_id: int, track: str, due_by: Optional[date] = None) -> List[ScheduleRecord]:
        with self._session() as db:
            return crud.list_records(db, user_id, track, due_by=due_by)

    def list_reviews(self, user_id: int, track: Optional[str] = None, limit: int = 50) -> List[ReviewLog]:
        with self._session() as db:
            return crud.get_review_log(db, user_id, track=track, limit=limit)

    @staticmethod
    def _raise_lost_write(record: ScheduleRecord, current: Optional[ScheduleRecord]):
        if current is None:
            raise NotFoundError(record.user_id, record.item_id, record.track)
        raise ConcurrentUpdateError(
            f"Schedule record {record.id} changed (version {record.version} -> {current.version})"
        )
