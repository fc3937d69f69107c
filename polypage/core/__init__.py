"""
Core module - data models, field schema and error taxonomy.

This module contains:
- models: Documents, content units, typed fields, records, outcomes
- fields: Typed field-set schema with per-field copy policy
- errors: Exceptions raised across the pipeline
- utils: Shared utility functions
"""

from polypage.core.models import (
    SourceDocument,
    Page,
    ContentUnit,
    TextUnit,
    ImageUnit,
    TypedField,
    FieldKind,
    TitleField,
    RichTextField,
    CheckboxField,
    DateField,
    MultiSelectField,
    SelectField,
    FilesField,
    FileRef,
    UrlField,
    TranslationRecord,
    Outcome,
    OutcomeStatus,
    RunReport,
)
from polypage.core.fields import (
    FieldSchema,
    FieldSpec,
    FieldPolicy,
    FieldRole,
    default_schema,
)
from polypage.core.errors import (
    PolypageError,
    ConfigurationError,
    FetchError,
    TranslationError,
    StoreWriteError,
    StoreReadError,
    DuplicateRecordError,
    EnumerationError,
    ReplicationError,
)

__all__ = [
    # Models
    "SourceDocument",
    "Page",
    "ContentUnit",
    "TextUnit",
    "ImageUnit",
    "TypedField",
    "FieldKind",
    "TitleField",
    "RichTextField",
    "CheckboxField",
    "DateField",
    "MultiSelectField",
    "SelectField",
    "FilesField",
    "FileRef",
    "UrlField",
    "TranslationRecord",
    "Outcome",
    "OutcomeStatus",
    "RunReport",
    # Field schema
    "FieldSchema",
    "FieldSpec",
    "FieldPolicy",
    "FieldRole",
    "default_schema",
    # Errors
    "PolypageError",
    "ConfigurationError",
    "FetchError",
    "TranslationError",
    "StoreWriteError",
    "StoreReadError",
    "DuplicateRecordError",
    "EnumerationError",
    "ReplicationError",
]
