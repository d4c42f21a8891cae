"""Scheduling service: the one entry point other modules use.

Every mutating operation runs a read-evaluate-write cycle under a lock
keyed by (user, item, track). The store's conditional update covers
writers outside this process.
"""
import threading
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterable, List, Optional

from vocab_scheduler.catalog import VocabularyCatalog
from vocab_scheduler.config import Settings, TrackPolicy, settings as default_settings
from vocab_scheduler.due_query import list_due
from vocab_scheduler.errors import AlreadyTrackedError, ItemNotFoundError, NotFoundError, ValidationError
from vocab_scheduler.logger import (
    log_record_created,
    log_record_mastered,
    log_record_removed,
    log_review_submitted,
)
from vocab_scheduler.models import ReviewLog, ScheduleRecord
from vocab_scheduler.schemas import (
    DueItem,
    DueList,
    ReviewLogOut,
    ReviewResult,
    ScheduleRecordOut,
    TrackedItem,
    TrackStats,
)
from vocab_scheduler.sm2 import (
    ReviewStrategy,
    ScheduleState,
    Track,
    get_days_overdue,
    get_strategy,
    is_due_for_review,
    next_review_date,
    parse_track,
)
from vocab_scheduler.store import ScheduleStore


def _validate_id(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    return value


def state_of(record: ScheduleRecord) -> ScheduleState:
    return ScheduleState(
        ease_factor=record.ease_factor,
        interval_days=record.interval_days,
        repetitions=record.repetitions,
        times_forgotten=record.times_forgotten or 0,
    )


class KeyedLocks:
    """One lock per key, dropped once no caller holds or waits on it"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}  # key -> [lock, holders and waiters]

    @contextmanager
    def hold(self, key):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class SchedulingService:
    """
    Orchestrates schedule records for both tracks.

    Args:
        store: Persistence for schedule records
        catalog: Vocabulary lookups for validation and display data
        config: Track policies (defaults to the environment settings)
        today: Callable returning the current date; overridable for tests
    """

    def __init__(
        self,
        store: ScheduleStore,
        catalog: VocabularyCatalog,
        config: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.catalog = catalog
        self.config = config or default_settings
        self.today = today
        self._locks = KeyedLocks()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def register_failure(
        self,
        user_id: int,
        item_id: int,
        track: str = Track.BINARY,
        reference_date: date = None,
    ) -> ScheduleRecordOut:
        """
        Record a failed recall, creating the record if it is not tracked yet.

        Duplicate calls racing on the same pair are safe: losing the insert
        race falls through to the update path.
        """
        track = parse_track(track)
        self._validate_pair(user_id, item_id)
        self._require_item(item_id)
        strategy = get_strategy(track)
        policy = self._policy(track)
        today = reference_date or self.today()

        with self._locks.hold((user_id, item_id, track)):
            record = self.store.find_one(user_id, item_id, track.value)
            if record is None:
                created = self.store.insert_if_absent(
                    self._new_record(user_id, item_id, track, policy, today, failed=True)
                )
                if created is not None:
                    log_record_created(user_id, item_id, track.value, created.next_review_date.isoformat(), "failure")
                    return ScheduleRecordOut.model_validate(created)
                record = self.store.find_one(user_id, item_id, track.value)
                if record is None:
                    raise NotFoundError(user_id, item_id, track.value)

            result = self._apply(record, strategy, policy, strategy.failure_outcome, today)
            return result.record

    def register_success(
        self,
        user_id: int,
        item_id: int,
        quality_signal,
        track: str = Track.BINARY,
        reference_date: date = None,
    ) -> ReviewResult:
        """
        Record a recall for an item that may or may not be tracked.

        Untracked items are left alone and reported as "not_tracked"; only
        items that were added or failed before take part in scheduling.
        """
        return self._submit(user_id, item_id, quality_signal, track, reference_date, require_record=False)

    def review(
        self,
        user_id: int,
        item_id: int,
        quality_signal,
        track: str = Track.GRADED,
        reference_date: date = None,
    ) -> ReviewResult:
        """Review a tracked item; raises NotFoundError if it is not tracked"""
        return self._submit(user_id, item_id, quality_signal, track, reference_date, require_record=True)

    def add_item(
        self,
        user_id: int,
        item_id: int,
        track: str = Track.GRADED,
        reference_date: date = None,
    ) -> ScheduleRecordOut:
        """Start tracking an item; raises AlreadyTrackedError if tracked"""
        track = parse_track(track)
        self._validate_pair(user_id, item_id)
        self._require_item(item_id)
        policy = self._policy(track)
        today = reference_date or self.today()

        with self._locks.hold((user_id, item_id, track)):
            created = self.store.insert_if_absent(
                self._new_record(user_id, item_id, track, policy, today, failed=False)
            )
        if created is None:
            raise AlreadyTrackedError(user_id, item_id, track.value)
        log_record_created(user_id, item_id, track.value, created.next_review_date.isoformat(), "add")
        return ScheduleRecordOut.model_validate(created)

    def add_items(
        self,
        user_id: int,
        item_ids: Iterable[int],
        track: str = Track.GRADED,
        reference_date: date = None,
    ) -> int:
        """Track several items at once, skipping those already tracked"""
        added = 0
        for item_id in item_ids:
            try:
                self.add_item(user_id, item_id, track, reference_date)
            except AlreadyTrackedError:
                continue
            added += 1
        return added

    def remove(self, user_id: int, item_id: int, track: str = Track.GRADED) -> None:
        """Stop tracking an item"""
        track = parse_track(track)
        self._validate_pair(user_id, item_id)
        with self._locks.hold((user_id, item_id, track)):
            if not self.store.delete(user_id, item_id, track.value):
                raise NotFoundError(user_id, item_id, track.value)
        log_record_removed(user_id, item_id, track.value)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_record(self, user_id: int, item_id: int, track: str = Track.GRADED) -> ScheduleRecordOut:
        track = parse_track(track)
        self._validate_pair(user_id, item_id)
        record = self.store.find_one(user_id, item_id, track.value)
        if record is None:
            raise NotFoundError(user_id, item_id, track.value)
        return ScheduleRecordOut.model_validate(record)

    def get_due(self, user_id: int, as_of: date = None, track: str = Track.GRADED) -> DueList:
        """Due records joined with catalog display data"""
        track = parse_track(track)
        _validate_id(user_id, "user_id")
        as_of = as_of or self.today()

        records = list_due(self.store, user_id, track.value, as_of)
        catalog_items = self.catalog.get_items(r.item_id for r in records)

        items = []
        for record in records:
            entry = catalog_items.get(record.item_id)
            items.append(DueItem(
                record=ScheduleRecordOut.model_validate(record),
                english=entry.english if entry else None,
                german=entry.german if entry else None,
                level=entry.level if entry else None,
                days_overdue=get_days_overdue(record.next_review_date, as_of),
            ))
        return DueList(items=items, count=len(items))

    def list_records(self, user_id: int, as_of: date = None, track: str = Track.GRADED) -> List[TrackedItem]:
        """Every tracked record with its due flag, oldest due date first"""
        track = parse_track(track)
        _validate_id(user_id, "user_id")
        as_of = as_of or self.today()

        records = self.store.list_where(user_id, track.value)
        catalog_items = self.catalog.get_items(r.item_id for r in records)
        tracked = []
        for record in records:
            entry = catalog_items.get(record.item_id)
            tracked.append(TrackedItem(
                record=ScheduleRecordOut.model_validate(record),
                english=entry.english if entry else None,
                german=entry.german if entry else None,
                level=entry.level if entry else None,
                is_due=is_due_for_review(record.next_review_date, as_of),
            ))
        return tracked

    def get_stats(self, user_id: int, as_of: date = None, track: str = Track.GRADED) -> TrackStats:
        """
        Aggregate counts for one track.

        The learning/mastered split uses the track's mastered_threshold,
        which is a display policy and independent of mastery exit.
        """
        track = parse_track(track)
        _validate_id(user_id, "user_id")
        as_of = as_of or self.today()
        policy = self._policy(track)

        records = self.store.list_where(user_id, track.value)
        stats = TrackStats(
            total=len(records),
            due=sum(1 for r in records if is_due_for_review(r.next_review_date, as_of)),
        )
        if policy.mastered_threshold is not None:
            stats.mastered = sum(1 for r in records if r.repetitions >= policy.mastered_threshold)
            stats.learning = stats.total - stats.mastered
            if records:
                stats.avg_ease_factor = sum(r.ease_factor for r in records) / len(records)
        return stats

    def get_review_log(self, user_id: int, track: str = None, limit: int = 50) -> List[ReviewLogOut]:
        _validate_id(user_id, "user_id")
        track_value = parse_track(track).value if track else None
        return [
            ReviewLogOut.model_validate(entry)
            for entry in self.store.list_reviews(user_id, track=track_value, limit=limit)
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _submit(self, user_id, item_id, quality_signal, track, reference_date, require_record: bool) -> ReviewResult:
        track = parse_track(track)
        self._validate_pair(user_id, item_id)
        strategy = get_strategy(track)
        outcome = strategy.normalize(quality_signal)
        policy = self._policy(track)
        today = reference_date or self.today()

        with self._locks.hold((user_id, item_id, track)):
            record = self.store.find_one(user_id, item_id, track.value)
            if record is None:
                if require_record:
                    raise NotFoundError(user_id, item_id, track.value)
                return ReviewResult(status="not_tracked")
            return self._apply(record, strategy, policy, outcome, today)

    def _apply(
        self,
        record: ScheduleRecord,
        strategy: ReviewStrategy,
        policy: TrackPolicy,
        outcome,
        today: date,
    ) -> ReviewResult:
        """Evaluate one outcome against a record and persist the result"""
        new_state = strategy.evaluate(outcome, state_of(record))
        success = strategy.is_success(outcome)

        minimum = 0 if success else policy.minimum_interval_on_failure
        due = next_review_date(new_state.interval_days, today, minimum_days=minimum)

        mastered = (
            policy.mastery_exit_repetitions is not None
            and new_state.repetitions >= policy.mastery_exit_repetitions
        )
        log_entry = ReviewLog(
            user_id=record.user_id,
            item_id=record.item_id,
            track=strategy.track.value,
            outcome=int(outcome),
            reviewed_on=today,
            interval_days=new_state.interval_days,
            mastered=mastered,
        )
        if mastered:
            self.store.delete_reviewed(record, log_entry)
            self._log_review(record, strategy, outcome, new_state)
            log_record_mastered(record.user_id, record.item_id, strategy.track.value, new_state.repetitions)
            return ReviewResult(status="mastered")

        updated = self.store.update(
            record,
            {
                "ease_factor": new_state.ease_factor,
                "interval_days": new_state.interval_days,
                "repetitions": new_state.repetitions,
                "times_forgotten": new_state.times_forgotten,
                "next_review_date": due,
                "last_reviewed_date": today,
            },
            log_entry,
        )
        self._log_review(record, strategy, outcome, new_state)
        return ReviewResult(status="updated", record=ScheduleRecordOut.model_validate(updated))

    def _log_review(self, record, strategy, outcome, new_state: ScheduleState):
        log_review_submitted(
            record.user_id, record.item_id, strategy.track.value, int(outcome),
            new_state.interval_days, new_state.repetitions, new_state.ease_factor,
        )

    def _new_record(
        self,
        user_id: int,
        item_id: int,
        track: Track,
        policy: TrackPolicy,
        today: date,
        failed: bool,
    ) -> ScheduleRecord:
        interval = policy.initial_interval_days
        offset = policy.initial_due_offset_days
        times_forgotten = 0
        last_reviewed = None
        if failed:
            interval = max(interval, policy.minimum_interval_on_failure)
            offset = max(interval, policy.minimum_interval_on_failure)
            last_reviewed = today
            if track == Track.BINARY:
                times_forgotten = 1
        return ScheduleRecord(
            user_id=user_id,
            item_id=item_id,
            track=track.value,
            ease_factor=policy.initial_ease,
            interval_days=interval,
            repetitions=0,
            times_forgotten=times_forgotten,
            next_review_date=next_review_date(offset, today),
            last_reviewed_date=last_reviewed,
            version=1,
        )

    def _policy(self, track: Track) -> TrackPolicy:
        return self.config.policy_for(track.value)

    def _validate_pair(self, user_id, item_id):
        _validate_id(user_id, "user_id")
        _validate_id(item_id, "item_id")

    def _require_item(self, item_id: int):
        if not self.catalog.item_exists(item_id):
            raise ItemNotFoundError(item_id)
