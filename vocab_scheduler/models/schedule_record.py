from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from vocab_scheduler.database import Base

class ScheduleRecord(Base):
    """SM-2 spaced repetition state per (user, vocabulary item, track)"""
    __tablename__ = "schedule_records"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", "track", name="uq_schedule_user_item_track"),
        Index("ix_schedule_due", "user_id", "track", "next_review_date"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)  # owned by the auth layer
    item_id = Column(Integer, ForeignKey("vocabulary.id", ondelete="CASCADE"), nullable=False)
    track = Column(String, nullable=False)  # "graded" or "binary"
    
    # SM-2 algorithm fields
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval_days = Column(Integer, nullable=False, default=0)
    repetitions = Column(Integer, nullable=False, default=0)  # consecutive successes
    times_forgotten = Column(Integer, nullable=False, default=0)  # due-list tie-break only
    
    last_reviewed_date = Column(Date)
    next_review_date = Column(Date, nullable=False)
    
    added_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, nullable=False, default=1)
    
    item = relationship("VocabularyItem", back_populates="schedule_records")
