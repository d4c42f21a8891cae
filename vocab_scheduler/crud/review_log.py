from sqlalchemy.orm import Session
from vocab_scheduler.models import ReviewLog
from typing import List, Optional

def get_review_log(db: Session, user_id: int, track: Optional[str] = None, limit: int = 50) -> List[ReviewLog]:
    """Get recent review submissions for a user, newest first"""
    query = db.query(ReviewLog).filter(ReviewLog.user_id == user_id)
    if track:
        query = query.filter(ReviewLog.track == track)
    return query.order_by(
        ReviewLog.reviewed_on.desc(),
        ReviewLog.id.desc()
    ).limit(limit).all()
