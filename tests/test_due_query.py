from datetime import timedelta
from types import SimpleNamespace

from vocab_scheduler.due_query import filter_due, list_due

from tests.conftest import TODAY


def _record(id, days_from_today, times_forgotten=0):
    return SimpleNamespace(
        id=id,
        next_review_date=TODAY + timedelta(days=days_from_today),
        times_forgotten=times_forgotten,
    )


def test_filter_due_excludes_future_records():
    records = [_record(1, 0), _record(2, 1), _record(3, -4)]
    assert [r.id for r in filter_due(records, TODAY)] == [3, 1]


def test_filter_due_orders_by_date_then_times_forgotten():
    records = [
        _record(1, -1, times_forgotten=0),
        _record(2, -2, times_forgotten=1),
        _record(3, -2, times_forgotten=4),
        _record(4, -1, times_forgotten=2),
        _record(5, -2, times_forgotten=1),
    ]
    # ties on both keys keep insertion order
    assert [r.id for r in filter_due(records, TODAY)] == [3, 2, 5, 4, 1]


def test_list_due_reads_through_store(service, store, item_ids):
    a, b, c, d = item_ids
    three_days_ago = TODAY - timedelta(days=3)

    service.register_failure(1, a, "binary", reference_date=three_days_ago)
    for _ in range(3):
        service.register_failure(1, b, "binary", reference_date=three_days_ago)
    service.register_failure(1, c, "binary", reference_date=TODAY - timedelta(days=2))
    service.register_failure(1, d, "binary", reference_date=TODAY)
    # another user's record never leaks in
    service.register_failure(2, a, "binary", reference_date=three_days_ago)

    due = list_due(store, 1, "binary", TODAY)

    assert [r.item_id for r in due] == [b, a, c]


def test_list_due_is_a_pure_read(service, store, item_ids):
    service.add_item(1, item_ids[0], "graded")
    service.add_item(1, item_ids[1], "graded")

    first = list_due(store, 1, "graded", TODAY)
    second = list_due(store, 1, "graded", TODAY)

    def snapshot(records):
        return [(r.item_id, r.version, r.next_review_date, r.repetitions) for r in records]

    assert snapshot(first) == snapshot(second)
    assert all(r.version == 1 for r in second)
