"""
Typed field-set schema.

Each destination field is declared once with its kind and a copy policy.
The schema decides which fields are written back to a destination page and
where the translated title and description go, so replication never has to
probe a source document field by field.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from polypage.core.errors import ConfigurationError
from polypage.core.models import (
    CheckboxField,
    FieldKind,
    RichTextField,
    SourceDocument,
    TitleField,
    TypedField,
)


class FieldPolicy(str, Enum):
    """What replication does with a field."""

    COPY = "copy"                        # copy verbatim when present
    TRANSLATE = "translate"              # substitute the translated text
    SKIP_IF_ABSENT = "skip_if_absent"    # optional field, copied only when present


class FieldRole(str, Enum):
    """Fields the pipeline needs to find by meaning rather than by name."""

    TITLE = "title"
    DESCRIPTION = "description"
    PUBLISHED = "published"


class FieldSpec(BaseModel):
    name: str
    kind: FieldKind
    policy: FieldPolicy = FieldPolicy.COPY
    role: FieldRole | None = None


class FieldSchema(BaseModel):
    """
    Ordered field declarations, validated once.

    Rules:
    - field names are unique
    - each role is held by at most one field
    - a title role requires a title field, a description role a rich-text
      field, a published role a checkbox
    - only title/description fields can be translated
    """

    fields: list[FieldSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check(self) -> FieldSchema:
        seen: set[str] = set()
        roles: dict[FieldRole, str] = {}
        expected_kind = {
            FieldRole.TITLE: FieldKind.TITLE,
            FieldRole.DESCRIPTION: FieldKind.RICH_TEXT,
            FieldRole.PUBLISHED: FieldKind.CHECKBOX,
        }
        for spec in self.fields:
            if spec.name in seen:
                raise ValueError(f"Duplicate field: {spec.name}")
            seen.add(spec.name)

            if spec.role is not None:
                if spec.role in roles:
                    raise ValueError(
                        f"Role {spec.role.value} held by both {roles[spec.role]} and {spec.name}"
                    )
                if spec.kind != expected_kind[spec.role]:
                    raise ValueError(
                        f"Field {spec.name} has role {spec.role.value} "
                        f"but kind {spec.kind.value}"
                    )
                roles[spec.role] = spec.name

            if spec.policy == FieldPolicy.TRANSLATE and spec.role not in (
                FieldRole.TITLE,
                FieldRole.DESCRIPTION,
            ):
                raise ValueError(f"Only title/description can be translated: {spec.name}")

        if FieldRole.TITLE not in roles:
            raise ValueError("Schema needs a field with the title role")
        return self

    @classmethod
    def from_specs(cls, specs: list[dict]) -> FieldSchema:
        """Build from raw config, raising ConfigurationError on bad input."""
        try:
            return cls(fields=specs)
        except ValueError as e:
            raise ConfigurationError(f"Invalid field schema: {e}") from e

    def by_role(self, role: FieldRole) -> FieldSpec | None:
        for spec in self.fields:
            if spec.role == role:
                return spec
        return None

    def translates(self, role: FieldRole) -> bool:
        spec = self.by_role(role)
        return spec is not None and spec.policy == FieldPolicy.TRANSLATE

    @property
    def title_field(self) -> str:
        return self.by_role(FieldRole.TITLE).name

    @property
    def description_field(self) -> str | None:
        spec = self.by_role(FieldRole.DESCRIPTION)
        return spec.name if spec else None

    @property
    def published_field(self) -> str | None:
        spec = self.by_role(FieldRole.PUBLISHED)
        return spec.name if spec else None

    # -------------------------------------------------------------------------
    # Write-back
    # -------------------------------------------------------------------------

    def initial_fields(self, published: bool = True) -> dict[str, TypedField]:
        """Fields for the empty destination page created before filling it."""
        if self.published_field is None:
            return {}
        return {self.published_field: CheckboxField(checked=published)}

    def build_write_back(
        self,
        doc: SourceDocument,
        title: str,
        description: str,
    ) -> dict[str, TypedField]:
        """
        Field set for a destination page.

        Title and description are always written (with the source field id
        when there is one). Every other declared field is copied only when
        the source document has it, with a matching kind.
        """
        result: dict[str, TypedField] = {}
        for spec in self.fields:
            source = doc.fields.get(spec.name)
            field_id = source.field_id if source is not None else None

            if spec.role == FieldRole.TITLE:
                result[spec.name] = TitleField(text=title, field_id=field_id)
                continue
            if spec.role == FieldRole.DESCRIPTION:
                result[spec.name] = RichTextField(text=description, field_id=field_id)
                continue

            if source is None or source.kind != spec.kind.value:
                continue
            result[spec.name] = source.model_copy(deep=True)
        return result


DEFAULT_FIELDS: list[dict] = [
    {"name": "Name", "kind": "title", "policy": "translate", "role": "title"},
    {"name": "Desc", "kind": "rich_text", "policy": "translate", "role": "description"},
    {"name": "Published", "kind": "checkbox", "role": "published"},
    {"name": "Date", "kind": "date", "policy": "skip_if_absent"},
    {"name": "Slug", "kind": "rich_text"},
    {"name": "Tags", "kind": "multi_select", "policy": "skip_if_absent"},
    {"name": "OGimage", "kind": "url", "policy": "skip_if_absent"},
    {"name": "keywords", "kind": "multi_select", "policy": "skip_if_absent"},
    {"name": "Category", "kind": "select"},
    {"name": "ContainsTOC", "kind": "checkbox", "policy": "skip_if_absent"},
    {"name": "Author Slug", "kind": "select", "policy": "skip_if_absent"},
    {"name": "FilesAndMedia", "kind": "files", "policy": "skip_if_absent"},
]


def default_schema() -> FieldSchema:
    return FieldSchema.from_specs(DEFAULT_FIELDS)
