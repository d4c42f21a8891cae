from vocab_scheduler.crud.vocabulary import create_item, get_item, get_items, list_items
from vocab_scheduler.crud.schedule_record import (
    get_record,
    insert_record,
    apply_review,
    delete_record,
    list_records
)
from vocab_scheduler.crud.review_log import get_review_log

__all__ = [
    "create_item",
    "get_item",
    "get_items",
    "list_items",
    "get_record",
    "insert_record",
    "apply_review",
    "delete_record",
    "list_records",
    "get_review_log",
]
