from sqlalchemy.orm import Session
from vocab_scheduler.models import VocabularyItem
from vocab_scheduler.schemas import VocabularyItemCreate
from typing import Iterable, List, Optional

def create_item(db: Session, item: VocabularyItemCreate) -> VocabularyItem:
    """Add a word to the catalog"""
    db_item = VocabularyItem(**item.model_dump())
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item

def get_item(db: Session, item_id: int) -> Optional[VocabularyItem]:
    """Get catalog entry by ID"""
    return db.query(VocabularyItem).filter(VocabularyItem.id == item_id).first()

def get_items(db: Session, item_ids: Iterable[int]) -> List[VocabularyItem]:
    """Get several catalog entries in one query"""
    ids = list(set(item_ids))
    if not ids:
        return []
    return db.query(VocabularyItem).filter(VocabularyItem.id.in_(ids)).all()

def list_items(db: Session, level: Optional[str] = None, limit: int = 100) -> List[VocabularyItem]:
    """List catalog entries, optionally for one level"""
    query = db.query(VocabularyItem)
    if level:
        query = query.filter(VocabularyItem.level == level)
    return query.order_by(VocabularyItem.id).limit(limit).all()
