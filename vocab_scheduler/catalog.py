"""Read-only view of the vocabulary catalog used by the scheduler."""
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from vocab_scheduler import crud
from vocab_scheduler.errors import StoreError
from vocab_scheduler.schemas import VocabularyItemOut


class VocabularyCatalog(Protocol):

    def item_exists(self, item_id: int) -> bool:
        ...

    def get_item(self, item_id: int) -> Optional[VocabularyItemOut]:
        ...

    def get_items(self, item_ids: Iterable[int]) -> Dict[int, VocabularyItemOut]:
        ...


class SqlVocabularyCatalog:
    """Catalog lookups against the vocabulary table"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def item_exists(self, item_id: int) -> bool:
        return self.get_item(item_id) is not None

    def get_item(self, item_id: int) -> Optional[VocabularyItemOut]:
        db = self.session_factory()
        try:
            item = crud.get_item(db, item_id)
            return VocabularyItemOut.model_validate(item) if item else None
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        finally:
            db.close()

    def get_items(self, item_ids: Iterable[int]) -> Dict[int, VocabularyItemOut]:
        db = self.session_factory()
        try:
            return {
                item.id: VocabularyItemOut.model_validate(item)
                for item in crud.get_items(db, item_ids)
            }
        except SQLAlchemyError as e:
            raise StoreError(str(e)) from e
        finally:
            db.close()
