"""
Local storage implementations for development.

These are in-memory or filesystem-based implementations
that work without any external services.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

from polypage.core.errors import DuplicateRecordError, StoreWriteError
from polypage.core.models import ContentUnit, Page, SourceDocument, TranslationRecord, TypedField
from polypage.storage.base import (
    ContentStorage,
    DocumentStorage,
    RecordStorage,
    StorageProvider,
)


# =============================================================================
# In-Memory Document Storage
# =============================================================================


class InMemoryDocumentStorage(DocumentStorage):
    """Collections of documents held in dicts, paginated like the real store."""

    def __init__(self):
        self._collections: dict[str, list[str]] = {}  # collection_id -> document ids
        self._documents: dict[str, SourceDocument] = {}
        self._units: dict[str, list[ContentUnit]] = {}

    def add_document(
        self,
        collection_id: str,
        document: SourceDocument,
        units: list[ContentUnit] | None = None,
    ) -> SourceDocument:
        """Seed a document into a collection."""
        self._collections.setdefault(collection_id, []).append(document.id)
        self._documents[document.id] = document
        self._units[document.id] = list(units or [])
        return document

    def documents_in(self, collection_id: str) -> list[SourceDocument]:
        return [self._documents[i] for i in self._collections.get(collection_id, [])]

    async def query_collection(
        self,
        collection_id: str,
        cursor: str | None = None,
        page_size: int = 100,
    ) -> Page:
        ids = self._collections.get(collection_id, [])
        start = int(cursor) if cursor else 0
        end = start + page_size
        has_more = end < len(ids)
        return Page(
            items=[self._documents[i] for i in ids[start:end]],
            next_cursor=str(end) if has_more else None,
            has_more=has_more,
        )

    async def get_document(self, document_id: str) -> SourceDocument:
        if document_id not in self._documents:
            raise KeyError(f"Document not found: {document_id}")
        return self._documents[document_id]

    async def create_document(self, collection_id: str, fields: dict[str, TypedField]) -> str:
        document_id = str(uuid.uuid4())
        self.add_document(
            collection_id,
            SourceDocument(id=document_id, url=f"memory://{document_id}", fields=dict(fields)),
        )
        return document_id

    async def update_document_fields(self, document_id: str, fields: dict[str, TypedField]) -> None:
        if document_id not in self._documents:
            raise StoreWriteError("update_document_fields", document_id, "document not found")
        self._documents[document_id].fields.update(fields)

    async def list_content_units(self, document_id: str) -> list[ContentUnit]:
        return list(self._units.get(document_id, []))

    async def append_content_units(self, document_id: str, units: list[ContentUnit]) -> None:
        if document_id not in self._documents:
            raise StoreWriteError("append_content_units", document_id, "document not found")
        self._units[document_id].extend(units)

    async def list_raw_children(self, document_id: str) -> list[dict[str, Any]]:
        return [unit.model_dump() for unit in self._units.get(document_id, [])]


# =============================================================================
# Local Filesystem Content Storage
# =============================================================================


class LocalContentStorage(ContentStorage):
    """Store content on local filesystem."""

    def __init__(self, base_path: str = "./data/content"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _key_to_path(self, key: str) -> Path:
        return self.base_path / key

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        path = self._key_to_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return key

    async def get(self, key: str) -> bytes:
        path = self._key_to_path(key)
        if not path.exists():
            raise FileNotFoundError(f"Content not found: {key}")
        return path.read_bytes()

    async def delete(self, key: str) -> bool:
        path = self._key_to_path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    async def get_url(self, key: str) -> str:
        return self._key_to_path(key).absolute().as_uri()


# =============================================================================
# In-Memory Record Storage
# =============================================================================


class InMemoryRecordStorage(RecordStorage):
    """Translation records in a dict keyed by source document id."""

    def __init__(self):
        self._records: dict[str, TranslationRecord] = {}

    async def insert_record(self, record_id: str, source_url: str) -> None:
        if record_id in self._records:
            raise DuplicateRecordError(record_id)
        self._records[record_id] = TranslationRecord(id=record_id, source_url=source_url)

    async def update_record(self, record_id: str, urls: dict[str, str]) -> None:
        if record_id not in self._records:
            raise StoreWriteError("update_record", record_id, "record not found")
        self._records[record_id].urls.update(urls)

    async def get_record(self, record_id: str) -> TranslationRecord | None:
        return self._records.get(record_id)


# =============================================================================
# Factory
# =============================================================================


def create_local_storage(data_dir: str = "./data") -> StorageProvider:
    """Create a StorageProvider with local implementations."""
    return StorageProvider(
        documents=InMemoryDocumentStorage(),
        content=LocalContentStorage(f"{data_dir}/content"),
        records=InMemoryRecordStorage(),
    )
