"""
Error taxonomy for the translation pipeline.

Only EnumerationError aborts a run. Everything else is scoped to one
content unit, one (document, language) pair, or one document, and ends up
in the run report instead of propagating.
"""

from __future__ import annotations


class PolypageError(Exception):
    """Base class for all pipeline errors."""
    pass


class ConfigurationError(PolypageError):
    """Invalid pipeline configuration or field schema."""
    pass


class FetchError(PolypageError):
    """A remote image could not be downloaded after all attempts."""

    def __init__(self, url: str, attempts: int, message: str = ""):
        self.url = url
        self.attempts = attempts
        super().__init__(
            message or f"Failed to download image after {attempts} attempts: {url}"
        )


class TranslationError(PolypageError):
    """The translation backend failed for one payload."""

    def __init__(self, message: str, source: str = "", target: str = ""):
        super().__init__(message)
        self.source = source
        self.target = target


class StoreWriteError(PolypageError):
    """A write to the document, blob or record store failed."""

    def __init__(self, operation: str, target: str, message: str = ""):
        self.operation = operation
        self.target = target
        super().__init__(message or f"{operation} failed for {target}")


class StoreReadError(PolypageError):
    """A read from the document or record store failed."""

    def __init__(self, operation: str, target: str, message: str = ""):
        self.operation = operation
        self.target = target
        super().__init__(message or f"{operation} failed for {target}")


class DuplicateRecordError(PolypageError):
    """A translation record already exists for this document."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Translation record already exists: {record_id}")


class EnumerationError(PolypageError):
    """The source collection could not be listed."""

    def __init__(self, collection_id: str, message: str = ""):
        self.collection_id = collection_id
        super().__init__(message or f"Could not enumerate collection {collection_id}")


class ReplicationError(PolypageError):
    """Replicating one document into one language failed."""

    def __init__(self, document_id: str, language: str, reason: str):
        self.document_id = document_id
        self.language = language
        self.reason = reason
        super().__init__(f"Replication of {document_id} to {language} failed: {reason}")
