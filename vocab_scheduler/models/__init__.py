from vocab_scheduler.models.vocabulary import VocabularyItem
from vocab_scheduler.models.schedule_record import ScheduleRecord
from vocab_scheduler.models.review_log import ReviewLog

__all__ = [
    "VocabularyItem",
    "ScheduleRecord",
    "ReviewLog"
]
