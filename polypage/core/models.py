"""
Core data models for the translation pipeline.

Source documents and their content units are owned by the external content
store; these models are read-only snapshots of them. Outcomes and reports
are produced by the orchestrator and handed back to callers.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from polypage.core.utils import utc_now


# =============================================================================
# Typed Fields
# =============================================================================


class FieldKind(str, Enum):
    """Kinds of typed fields a document can carry."""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    CHECKBOX = "checkbox"
    DATE = "date"
    MULTI_SELECT = "multi_select"
    SELECT = "select"
    FILES = "files"
    URL = "url"


class _FieldBase(BaseModel):
    # Stable slot identifier in the destination schema
    field_id: str | None = None


class TitleField(_FieldBase):
    kind: Literal["title"] = "title"
    text: str = ""


class RichTextField(_FieldBase):
    kind: Literal["rich_text"] = "rich_text"
    text: str = ""


class CheckboxField(_FieldBase):
    kind: Literal["checkbox"] = "checkbox"
    checked: bool = False


class DateField(_FieldBase):
    kind: Literal["date"] = "date"
    start: str
    end: str | None = None


class MultiSelectField(_FieldBase):
    kind: Literal["multi_select"] = "multi_select"
    names: list[str] = Field(default_factory=list)


class SelectField(_FieldBase):
    kind: Literal["select"] = "select"
    name: str = ""


class FileRef(BaseModel):
    """One entry of a file-list field."""

    name: str
    type: str = "external"  # "file" (hosted by the store) or "external"
    url: str


class FilesField(_FieldBase):
    kind: Literal["files"] = "files"
    files: list[FileRef] = Field(default_factory=list)


class UrlField(_FieldBase):
    kind: Literal["url"] = "url"
    url: str


TypedField = Annotated[
    Union[
        TitleField,
        RichTextField,
        CheckboxField,
        DateField,
        MultiSelectField,
        SelectField,
        FilesField,
        UrlField,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# Content Units
# =============================================================================


class TextUnit(BaseModel):
    """A paragraph, heading, list item or any other text-bearing block."""

    type: Literal["text"] = "text"
    kind: str = "paragraph"
    runs: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.runs)


class ImageUnit(BaseModel):
    """An embedded image, hosted by the content store or external."""

    type: Literal["image"] = "image"
    file_url: str | None = None
    external_url: str | None = None

    @property
    def source_url(self) -> str | None:
        """Internally hosted file wins over an external link."""
        return self.file_url or self.external_url


ContentUnit = Annotated[Union[TextUnit, ImageUnit], Field(discriminator="type")]


# =============================================================================
# Documents
# =============================================================================


class SourceDocument(BaseModel):
    """
    One row of the source collection.

    Fields keep the order the store returned them in. Content units are
    not embedded; they are listed separately from the document store.
    """

    id: str
    url: str = ""
    fields: dict[str, TypedField] = Field(default_factory=dict)
    created_time: str | None = None

    def text_of(self, name: str) -> str:
        """Plain text of a title/rich-text field, empty if absent."""
        field = self.fields.get(name)
        if isinstance(field, (TitleField, RichTextField)):
            return field.text
        return ""

    def is_checked(self, name: str) -> bool:
        field = self.fields.get(name)
        return isinstance(field, CheckboxField) and field.checked


class Page(BaseModel):
    """One page of a paginated collection query."""

    items: list[SourceDocument] = Field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


# =============================================================================
# Translation Records
# =============================================================================


class TranslationRecord(BaseModel):
    """Side-table row tracking destination links for one source document."""

    id: str
    source_url: str = ""
    urls: dict[str, str] = Field(default_factory=dict)  # language -> destination url


# =============================================================================
# Outcomes
# =============================================================================


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class Outcome(BaseModel):
    """Result of one (document, language) replication attempt."""

    document_id: str
    language: str
    status: OutcomeStatus
    destination_id: str | None = None
    destination_url: str | None = None
    reason: str | None = None

    @classmethod
    def success(
        cls, document_id: str, language: str, destination_id: str, destination_url: str
    ) -> Outcome:
        return cls(
            document_id=document_id,
            language=language,
            status=OutcomeStatus.SUCCESS,
            destination_id=destination_id,
            destination_url=destination_url,
        )

    @classmethod
    def failure(cls, document_id: str, language: str, reason: str) -> Outcome:
        return cls(
            document_id=document_id,
            language=language,
            status=OutcomeStatus.FAILURE,
            reason=reason,
        )

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def message(self) -> str:
        if self.ok:
            return (
                f"Page {self.document_id} translated to {self.language}: "
                f"{self.destination_url}"
            )
        return f"Error processing page {self.document_id} in {self.language}: {self.reason}"


class RunReport(BaseModel):
    """Everything a batch run did, in processing order."""

    outcomes: list[Outcome] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)  # document ids
    started_at: str = Field(default_factory=lambda: utc_now().isoformat())

    def record(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)

    @property
    def success_messages(self) -> list[str]:
        return [o.message for o in self.outcomes if o.ok]

    @property
    def error_messages(self) -> list[str]:
        return [o.message for o in self.outcomes if not o.ok]

    @property
    def has_failures(self) -> bool:
        return any(not o.ok for o in self.outcomes)

    def summary(self) -> dict[str, object]:
        """JSON body returned by the server variant."""
        return {
            "message": "success",
            "successMessages": self.success_messages,
            "errorMessages": self.error_messages,
        }
