from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from vocab_scheduler.models import ScheduleRecord, ReviewLog
from datetime import date
from typing import List, Optional

def get_record(db: Session, user_id: int, item_id: int, track: str) -> Optional[ScheduleRecord]:
    """Get the schedule record for a (user, item) pair on one track"""
    return db.query(ScheduleRecord).filter(
        ScheduleRecord.user_id == user_id,
        ScheduleRecord.item_id == item_id,
        ScheduleRecord.track == track
    ).first()

def insert_record(db: Session, record: ScheduleRecord) -> Optional[ScheduleRecord]:
    """
    Insert a new schedule record.

    Returns None when the unique (user, item, track) constraint rejects the
    row, i.e. another writer created it first.
    """
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return None
    db.refresh(record)
    return record

def apply_review(
    db: Session,
    record_id: int,
    expected_version: int,
    changes: dict,
    log_entry: Optional[ReviewLog] = None,
    remove: bool = False
) -> int:
    """
    Conditionally write a review result.

    The UPDATE (or DELETE when remove is set) only matches if the row still
    carries expected_version. The review log row is written in the same
    transaction. Returns the number of matched rows (0 or 1).
    """
    query = db.query(ScheduleRecord).filter(
        ScheduleRecord.id == record_id,
        ScheduleRecord.version == expected_version
    )
    if remove:
        matched = query.delete(synchronize_session=False)
    else:
        values = dict(changes)
        values["version"] = expected_version + 1
        matched = query.update(values, synchronize_session=False)

    if matched != 1:
        db.rollback()
        return 0

    if log_entry is not None:
        db.add(log_entry)
    db.commit()
    return matched

def delete_record(db: Session, user_id: int, item_id: int, track: str) -> int:
    """Delete a schedule record; returns the number of deleted rows"""
    deleted = db.query(ScheduleRecord).filter(
        ScheduleRecord.user_id == user_id,
        ScheduleRecord.item_id == item_id,
        ScheduleRecord.track == track
    ).delete(synchronize_session=False)
    db.commit()
    return deleted

def list_records(db: Session, user_id: int, track: str, due_by: Optional[date] = None) -> List[ScheduleRecord]:
    """List a user's records on one track, oldest due date first"""
    query = db.query(ScheduleRecord).filter(
        ScheduleRecord.user_id == user_id,
        ScheduleRecord.track == track
    )
    if due_by is not None:
        query = query.filter(ScheduleRecord.next_review_date <= due_by)
    return query.order_by(
        ScheduleRecord.next_review_date.asc(),
        ScheduleRecord.times_forgotten.desc(),
        ScheduleRecord.id.asc()
    ).all()
