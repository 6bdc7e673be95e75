import copy
import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFound, PreconditionFailed, StoreUnavailable, VersionConflict
from ..models.models import StoredDocument
from .provider import Document, DocumentStore, apply_updates, encode_value, get_path, sort_key


logger = structlog.get_logger(__name__)


class SqlDocumentStore(DocumentStore):
    """DocumentStore persisted as JSON rows in the `documents` table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            row = self.db.get(StoredDocument, (collection, doc_id))
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not read {collection}/{doc_id}") from e
        return self._to_document(row) if row else None

    def list(
        self,
        collection: str,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        # Without order_by, `descending` means most recently written first, so
        # a limit keeps the newest documents
        if order_by is None and descending:
            row_order = (
                StoredDocument.updated_at.desc(),
                StoredDocument.created_at.desc(),
                StoredDocument.id.desc(),
            )
        else:
            row_order = (StoredDocument.created_at.asc(), StoredDocument.id.asc())
        try:
            rows = (
                self.db.query(StoredDocument)
                .filter(StoredDocument.collection == collection)
                .order_by(*row_order)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not list {collection}") from e

        docs = [self._to_document(row) for row in rows]
        if where:
            docs = [
                d for d in docs
                if all(get_path(d.data, path) == expected for path, expected in where.items())
            ]
        if order_by:
            present = [d for d in docs if get_path(d.data, order_by) is not None]
            missing = [d for d in docs if get_path(d.data, order_by) is None]
            present.sort(key=lambda d: sort_key(get_path(d.data, order_by)), reverse=descending)
            docs = present + missing
        if limit is not None:
            docs = docs[:limit]
        return docs

    def add(self, collection: str, data: Mapping[str, Any], doc_id: Optional[str] = None) -> Document:
        if doc_id and self.get(collection, doc_id) is not None:
            raise PreconditionFailed(f"{collection}/{doc_id} already exists")
        now = datetime.now(timezone.utc)
        row = StoredDocument(
            collection=collection,
            id=doc_id or uuid.uuid4().hex,
            data=encode_value(dict(data)),
            version=1,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(f"Could not add document to {collection}") from e
        logger.info("document_added", collection=collection, doc_id=row.id)
        return self._to_document(row)

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        try:
            row = self.db.get(StoredDocument, (collection, doc_id))
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Could not read {collection}/{doc_id}") from e
        if not row:
            raise NotFound(f"{collection}/{doc_id} not found")
        if expected_version is not None and row.version != expected_version:
            raise VersionConflict(
                f"{collection}/{doc_id} is at version {row.version}, expected {expected_version}"
            )

        # Assign a new dict so the JSON column is flagged dirty
        row.data = apply_updates(copy.deepcopy(row.data or {}), fields)
        row.version = row.version + 1
        row.updated_at = datetime.now(timezone.utc)
        try:
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(f"Could not update {collection}/{doc_id}") from e
        return self._to_document(row)

    @staticmethod
    def _to_document(row: StoredDocument) -> Document:
        return Document(id=row.id, data=copy.deepcopy(row.data or {}), version=row.version)
