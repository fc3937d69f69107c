"""
Pipeline services, leaf-first.

- images: ImageRelocator (download, re-host, clean up)
- units: ContentUnitTranslator (one block in, one block or None out)
- replicator: PageReplicator (one document into one language)
- orchestrator: BatchOrchestrator (all documents into all languages)

The LLM backend lives in services.ai and is imported on demand.
"""

from polypage.services.images import ImageRelocator
from polypage.services.units import ContentUnitTranslator
from polypage.services.replicator import PageReplicator, Replication
from polypage.services.orchestrator import (
    BatchOrchestrator,
    PublishedFilter,
    AllowListFilter,
    FilterPolicy,
)

__all__ = [
    "ImageRelocator",
    "ContentUnitTranslator",
    "PageReplicator",
    "Replication",
    "BatchOrchestrator",
    "PublishedFilter",
    "AllowListFilter",
    "FilterPolicy",
]
