"""
Storage abstraction layer.

Every external system the pipeline talks to sits behind one of these
interfaces, so the orchestration code never knows whether it is writing to
Notion and Supabase or to the in-memory stand-ins used in development.

Integration Points:
- DocumentStorage → Notion databases, pages and blocks
- ContentStorage → Supabase Storage bucket (re-hosted images)
- RecordStorage → Supabase table tracking per-language links
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from polypage.core.models import ContentUnit, Page, SourceDocument, TranslationRecord, TypedField


# =============================================================================
# Storage Interfaces
# =============================================================================


class DocumentStorage(ABC):
    """
    The content store holding source and destination documents.

    Production Implementation: Notion REST API
    Local Implementation: In-memory
    """

    @abstractmethod
    async def query_collection(
        self,
        collection_id: str,
        cursor: str | None = None,
        page_size: int = 100,
    ) -> Page:
        """Return one page of documents, starting at cursor."""
        pass

    @abstractmethod
    async def get_document(self, document_id: str) -> SourceDocument:
        """Retrieve a single document with its fields."""
        pass

    @abstractmethod
    async def create_document(self, collection_id: str, fields: dict[str, TypedField]) -> str:
        """Create a document in a collection, return its id."""
        pass

    @abstractmethod
    async def update_document_fields(self, document_id: str, fields: dict[str, TypedField]) -> None:
        """Overwrite the given fields of a document."""
        pass

    @abstractmethod
    async def list_content_units(self, document_id: str) -> list[ContentUnit]:
        """All content units of a document, in order."""
        pass

    @abstractmethod
    async def append_content_units(self, document_id: str, units: list[ContentUnit]) -> None:
        """Append units to the end of a document."""
        pass

    @abstractmethod
    async def list_raw_children(self, document_id: str) -> list[dict[str, Any]]:
        """Child units exactly as the store represents them."""
        pass


class ContentStorage(ABC):
    """
    Storage for binary content (re-hosted images).

    Production Implementation: Supabase Storage
    Local Implementation: Filesystem
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store content, return the stored key."""
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Retrieve content by key."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete content."""
        pass

    @abstractmethod
    async def get_url(self, key: str) -> str:
        """Get a durable public URL for stored content."""
        pass


class RecordStorage(ABC):
    """
    Side table with one row per translated source document.

    Production Implementation: Supabase (PostgREST)
    Local Implementation: In-memory
    """

    @abstractmethod
    async def insert_record(self, record_id: str, source_url: str) -> None:
        """Create the row; raise DuplicateRecordError if it exists."""
        pass

    @abstractmethod
    async def update_record(self, record_id: str, urls: dict[str, str]) -> None:
        """Merge language → destination url entries into the row."""
        pass

    @abstractmethod
    async def get_record(self, record_id: str) -> TranslationRecord | None:
        """Get a row by source document id."""
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Built once at startup; services receive the individual backends they
    need from it.
    """

    model_config = {"arbitrary_types_allowed": True}

    documents: DocumentStorage
    content: ContentStorage
    records: RecordStorage

    async def aclose(self) -> None:
        """Close any HTTP clients held by the backends."""
        for backend in (self.documents, self.content, self.records):
            close = getattr(backend, "aclose", None)
            if close is not None:
                await close()
