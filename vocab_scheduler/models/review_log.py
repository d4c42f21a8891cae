from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime
from datetime import datetime
from vocab_scheduler.database import Base

class ReviewLog(Base):
    """One row per review submission, kept after the schedule record is gone"""
    __tablename__ = "review_log"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    item_id = Column(Integer, nullable=False)
    track = Column(String, nullable=False)
    
    outcome = Column(Integer, nullable=False)  # 0-5 graded, 0/1 binary
    reviewed_on = Column(Date, nullable=False)
    interval_days = Column(Integer, nullable=False)
    mastered = Column(Boolean, default=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
