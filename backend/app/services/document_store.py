"""Document store adapter: key-addressed JSON records grouped by collection path."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.record import Record
from app.utils.exceptions import DocumentStoreError, NotFoundError
from app.utils.logger import logger
from app.utils.serialization import deep_merge

ASCENDING = "asc"
DESCENDING = "desc"


class DocumentStore(ABC):
    """Key-addressed record store.

    Writes are atomic per record. There is no cross-record transaction.
    """

    @abstractmethod
    async def get(self, collection_path: str, record_id: str) -> Dict[str, Any]:
        """Return the record's fields or raise NotFoundError."""

    @abstractmethod
    async def set(
        self,
        collection_path: str,
        record_id: str,
        fields: Dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Create or overwrite a record; with ``merge`` keep fields not being written."""

    @abstractmethod
    async def delete(self, collection_path: str, record_id: str) -> None:
        """Remove a record. Deleting an absent record is not an error."""

    @abstractmethod
    async def list(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        direction: str = DESCENDING,
    ) -> List[Dict[str, Any]]:
        """Return every record in a collection, optionally ordered by a field."""


class SQLDocumentStore(DocumentStore):
    """Document store kept in a single SQL table of JSON documents."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, collection_path: str, record_id: str) -> Optional[Record]:
        # Other sessions may have rewritten the row since it was loaded
        return self.db.query(Record).populate_existing().filter(
            Record.collection_path == collection_path,
            Record.record_id == record_id,
        ).first()

    async def get(self, collection_path: str, record_id: str) -> Dict[str, Any]:
        try:
            record = self._find(collection_path, record_id)
        except SQLAlchemyError as e:
            logger.error(f"[STORE] Read failed for {collection_path}/{record_id}: {e}", exc_info=True)
            raise DocumentStoreError(f"Read failed for {collection_path}/{record_id}") from e

        if not record:
            raise NotFoundError("Record", f"{collection_path}/{record_id}")
        return dict(record.data or {})

    async def set(
        self,
        collection_path: str,
        record_id: str,
        fields: Dict[str, Any],
        merge: bool = False,
    ) -> None:
        try:
            record = self._find(collection_path, record_id)
            if record is None:
                record = Record(
                    collection_path=collection_path,
                    record_id=record_id,
                    data=dict(fields),
                )
                self.db.add(record)
            elif merge:
                # Assign a new dict so the JSON column is flagged dirty
                record.data = deep_merge(record.data or {}, fields)
            else:
                record.data = dict(fields)

            self.db.commit()
            logger.debug(f"[STORE] Wrote {collection_path}/{record_id} (merge={merge})")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[STORE] Write failed for {collection_path}/{record_id}: {e}", exc_info=True)
            raise DocumentStoreError(f"Write failed for {collection_path}/{record_id}") from e

    async def delete(self, collection_path: str, record_id: str) -> None:
        try:
            deleted = self.db.query(Record).filter(
                Record.collection_path == collection_path,
                Record.record_id == record_id,
            ).delete(synchronize_session=False)
            self.db.commit()
            logger.debug(f"[STORE] Deleted {collection_path}/{record_id} (existed={bool(deleted)})")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[STORE] Delete failed for {collection_path}/{record_id}: {e}", exc_info=True)
            raise DocumentStoreError(f"Delete failed for {collection_path}/{record_id}") from e

    async def list(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        direction: str = DESCENDING,
    ) -> List[Dict[str, Any]]:
        if direction not in (ASCENDING, DESCENDING):
            raise ValueError(f"Invalid sort direction: {direction}")

        try:
            records = self.db.query(Record).populate_existing().filter(
                Record.collection_path == collection_path,
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"[STORE] List failed for {collection_path}: {e}", exc_info=True)
            raise DocumentStoreError(f"List failed for {collection_path}") from e

        documents = [dict(record.data or {}) for record in records]
        if not order_by:
            return documents

        # Records missing the field always sort last, whatever the direction
        with_field = [doc for doc in documents if doc.get(order_by) is not None]
        without_field = [doc for doc in documents if doc.get(order_by) is None]
        with_field.sort(key=lambda doc: doc[order_by], reverse=direction == DESCENDING)
        return with_field + without_field
