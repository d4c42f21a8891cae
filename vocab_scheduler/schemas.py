from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime

class VocabularyItemCreate(BaseModel):
    """Schema for adding a word to the catalog"""
    english: str
    german: str
    level: str = "B2"

class VocabularyItemOut(VocabularyItemCreate):
    """Schema for catalog display data"""
    id: int

    class Config:
        from_attributes = True

class ScheduleRecordOut(BaseModel):
    """Schema for a schedule record as seen by callers"""
    user_id: int
    item_id: int
    track: str
    ease_factor: float
    interval_days: int
    repetitions: int
    times_forgotten: int
    next_review_date: date
    last_reviewed_date: Optional[date] = None
    added_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ReviewResult(BaseModel):
    """Outcome of a review submission.

    status is "updated", "mastered" (record removed by mastery exit) or
    "not_tracked" (nothing to update).
    """
    status: str
    record: Optional[ScheduleRecordOut] = None

    @property
    def mastered(self) -> bool:
        return self.status == "mastered"

class DueItem(BaseModel):
    """Due record joined with catalog display fields"""
    record: ScheduleRecordOut
    english: Optional[str] = None
    german: Optional[str] = None
    level: Optional[str] = None
    days_overdue: int = 0

class DueList(BaseModel):
    """Schema for the due-list response"""
    items: List[DueItem]
    count: int

class TrackedItem(BaseModel):
    """Any tracked record with its due flag"""
    record: ScheduleRecordOut
    english: Optional[str] = None
    german: Optional[str] = None
    level: Optional[str] = None
    is_due: bool

class TrackStats(BaseModel):
    """Aggregate counts; the learning/mastered split is graded-track only"""
    total: int
    due: int
    learning: Optional[int] = None
    mastered: Optional[int] = None
    avg_ease_factor: Optional[float] = None

class ReviewLogOut(BaseModel):
    """Schema for one logged review submission"""
    item_id: int
    track: str
    outcome: int
    reviewed_on: date
    interval_days: int
    mastered: bool

    class Config:
        from_attributes = True
