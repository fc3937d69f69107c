"""
Pipeline configuration loader.

Loads the static pipeline definition (source database, per-language
destination databases, document filter, field schema, URL rules and the
server's fixed targets) from YAML and validates it once.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from polypage.core.errors import ConfigurationError
from polypage.core.fields import DEFAULT_FIELDS, FieldSchema, FieldSpec
from polypage.i18n.languages import normalize_language_code
from polypage.services.orchestrator import FilterPolicy, PublishedFilter


class ServerTargets(BaseModel):
    """Fixed targets for the HTTP endpoints, which take no parameters."""

    document_ids: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    inspect_block_id: str = ""


class PipelineConfig(BaseModel):
    source_database_id: str
    source_language: str = "en"
    languages: dict[str, str]  # language code -> destination database id
    filter: FilterPolicy = Field(default_factory=PublishedFilter)
    site_base_url: str = "https://www.notion.so"
    id_only_url_languages: list[str] = Field(default_factory=list)
    title_placeholder: str = "Untitled"
    fields: list[FieldSpec] = Field(default_factory=lambda: [FieldSpec(**f) for f in DEFAULT_FIELDS])
    server: ServerTargets = Field(default_factory=ServerTargets)

    @field_validator("languages")
    @classmethod
    def _normalize_languages(cls, value: dict[str, str]) -> dict[str, str]:
        if not value:
            raise ValueError("At least one target language is required")
        return {normalize_language_code(code): db for code, db in value.items()}

    @field_validator("id_only_url_languages")
    @classmethod
    def _normalize_codes(cls, value: list[str]) -> list[str]:
        return [normalize_language_code(code) for code in value]

    @model_validator(mode="after")
    def _check_server_languages(self) -> PipelineConfig:
        self.server.languages = [normalize_language_code(c) for c in self.server.languages]
        unknown = [c for c in self.server.languages if c not in self.languages]
        if unknown:
            raise ValueError(f"Server languages without a destination database: {unknown}")
        if not self.server.languages:
            self.server.languages = list(self.languages)
        return self

    def field_schema(self) -> FieldSchema:
        return FieldSchema.from_specs([f.model_dump() for f in self.fields])


def parse_pipeline_config(data: dict[str, Any]) -> PipelineConfig:
    """Validate raw config data, including the field schema."""
    try:
        config = PipelineConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid pipeline configuration: {e}") from e
    config.field_schema()  # fail on a bad schema now, not mid-run
    return config


def load_pipeline_config(path: Path | str) -> PipelineConfig:
    """
    Load and validate a pipeline YAML file.

    Raises:
        ConfigurationError: missing file, bad YAML or invalid values
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Pipeline config not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Pipeline config must be a mapping: {path}")
    return parse_pipeline_config(data)
