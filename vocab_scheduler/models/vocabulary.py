from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from vocab_scheduler.database import Base

class VocabularyItem(Base):
    """Catalog entry: an English/German word pair"""
    __tablename__ = "vocabulary"
    
    id = Column(Integer, primary_key=True, index=True)
    english = Column(String, nullable=False)
    german = Column(String, nullable=False)
    level = Column(String, default="B2")  # CEFR level
    created_at = Column(DateTime, default=datetime.utcnow)
    
    schedule_records = relationship("ScheduleRecord", back_populates="item", passive_deletes=True)
