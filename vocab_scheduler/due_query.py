"""Selection and ordering of records whose review date has arrived."""
from datetime import date
from typing import Iterable, List

from vocab_scheduler.models import ScheduleRecord


def due_sort_key(record: ScheduleRecord):
    # Oldest due date first, then the most often forgotten, then insertion order
    return (record.next_review_date, -(record.times_forgotten or 0), record.id or 0)


def filter_due(records: Iterable[ScheduleRecord], as_of: date) -> List[ScheduleRecord]:
    """Keep records due on or before as_of, in due-list order"""
    return sorted(
        (r for r in records if r.next_review_date <= as_of),
        key=due_sort_key,
    )


def list_due(store, user_id: int, track: str, as_of: date) -> List[ScheduleRecord]:
    """Read the due list for one user and track; never writes"""
    return filter_due(store.list_where(user_id, track, due_by=as_of), as_of)
