"""
Storage abstractions.

Integration Points:
- DocumentStorage → Notion (source and destination databases)
- ContentStorage → Supabase Storage (re-hosted images)
- RecordStorage → Supabase table (per-language destination links)
"""

from polypage.storage.base import (
    DocumentStorage,
    ContentStorage,
    RecordStorage,
    StorageProvider,
)
from polypage.storage.local import (
    InMemoryDocumentStorage,
    LocalContentStorage,
    InMemoryRecordStorage,
    create_local_storage,
)

__all__ = [
    "DocumentStorage",
    "ContentStorage",
    "RecordStorage",
    "StorageProvider",
    "InMemoryDocumentStorage",
    "LocalContentStorage",
    "InMemoryRecordStorage",
    "create_local_storage",
]
