"""
Production backends for the storage interfaces.

- notion: DocumentStorage over the Notion REST API
- supabase: ContentStorage (bucket) and RecordStorage (table) over Supabase
"""

from polypage.integrations.notion import NotionDocumentStorage
from polypage.integrations.supabase import (
    SupabaseContentStorage,
    SupabaseRecordStorage,
    create_supabase_client,
)

__all__ = [
    "NotionDocumentStorage",
    "SupabaseContentStorage",
    "SupabaseRecordStorage",
    "create_supabase_client",
]
