"""
Pipeline assembly.

Builds the service graph (translator → unit translator → replicator →
orchestrator) on top of a StorageProvider. Every collaborator is passed in
explicitly; nothing reaches for a global client.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from polypage.config import Settings, get_settings
from polypage.config_loader import PipelineConfig
from polypage.core.errors import ConfigurationError
from polypage.core.models import RunReport
from polypage.i18n.translator import ContentTranslator, TranslationBackend
from polypage.services.images import ImageRelocator
from polypage.services.orchestrator import AllowListFilter, BatchOrchestrator, PublishedFilter
from polypage.services.replicator import PageReplicator
from polypage.services.units import ContentUnitTranslator
from polypage.storage.base import StorageProvider
from polypage.storage.local import InMemoryRecordStorage, LocalContentStorage

logger = logging.getLogger(__name__)


class Pipeline(BaseModel):
    """Everything one run needs, wired together."""

    model_config = {"arbitrary_types_allowed": True}

    config: PipelineConfig
    storage: StorageProvider
    translator: ContentTranslator
    relocator: ImageRelocator
    replicator: PageReplicator
    orchestrator: BatchOrchestrator

    async def run(
        self,
        filter_policy: PublishedFilter | AllowListFilter | None = None,
        languages: list[str] | None = None,
    ) -> RunReport:
        """Run with the configured filter and languages unless overridden."""
        return await self.orchestrator.run(
            filter_policy or self.config.filter,
            languages or list(self.config.languages),
        )

    async def run_server_targets(self) -> RunReport:
        """The fixed document/language set behind the HTTP trigger."""
        return await self.orchestrator.run(
            AllowListFilter(ids=self.config.server.document_ids),
            self.config.server.languages,
        )

    async def aclose(self) -> None:
        await self.relocator.aclose()
        await self.storage.aclose()

    async def __aenter__(self) -> Pipeline:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()


def build_pipeline(
    config: PipelineConfig,
    storage: StorageProvider,
    backend: TranslationBackend,
    settings: Settings | None = None,
    relocator: ImageRelocator | None = None,
) -> Pipeline:
    """Wire services over the given storage and translation backend."""
    settings = settings or get_settings()

    translator = ContentTranslator(backend, source=config.source_language)
    relocator = relocator or ImageRelocator(
        storage.content,
        scratch_dir=settings.scratch_dir,
        attempts=settings.image_fetch_attempts,
        delay_seconds=settings.image_retry_delay_seconds,
    )
    replicator = PageReplicator(
        storage.documents,
        translator,
        ContentUnitTranslator(translator, relocator),
        schema=config.field_schema(),
        site_base_url=config.site_base_url,
        id_only_url_languages=config.id_only_url_languages,
        title_placeholder=config.title_placeholder,
    )
    orchestrator = BatchOrchestrator(
        storage.documents,
        storage.records,
        replicator,
        source_collection_id=config.source_database_id,
        destinations=config.languages,
        page_size=settings.page_size,
    )
    return Pipeline(
        config=config,
        storage=storage,
        translator=translator,
        relocator=relocator,
        replicator=replicator,
        orchestrator=orchestrator,
    )


def create_storage(settings: Settings) -> StorageProvider:
    """
    Production storage: Notion for documents, Supabase for images and records.

    Without Supabase credentials, images go to the local data directory and
    records are kept in memory (development only).
    """
    from polypage.integrations.notion import NotionDocumentStorage
    from polypage.integrations.supabase import (
        SupabaseContentStorage,
        SupabaseRecordStorage,
        create_supabase_client,
    )

    if not settings.use_notion:
        raise ConfigurationError("NOTION_API_KEY not set")

    documents = NotionDocumentStorage(
        api_key=settings.notion_api_key,
        notion_version=settings.notion_version,
        base_url=settings.notion_base_url,
        timeout=settings.http_timeout_seconds,
    )

    if settings.use_supabase:
        client = create_supabase_client(
            settings.supabase_url, settings.supabase_key, settings.http_timeout_seconds
        )
        return StorageProvider(
            documents=documents,
            content=SupabaseContentStorage(client, bucket=settings.supabase_bucket),
            records=SupabaseRecordStorage(client, table=settings.supabase_records_table),
        )

    if settings.is_production:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY are required in production")
    logger.warning(
        f"Supabase not configured: images stored under {settings.data_dir}, records kept in memory"
    )
    return StorageProvider(
        documents=documents,
        content=LocalContentStorage(f"{settings.data_dir}/content"),
        records=InMemoryRecordStorage(),
    )


def create_pipeline(config: PipelineConfig, settings: Settings | None = None) -> Pipeline:
    """
    Pipeline over the real services, translating with the configured LLM.

    The LM is resolved before any client is opened; an unknown provider or
    a missing key is a configuration error, not a per-call translation failure.

    Raises:
        ConfigurationError: missing credentials for Notion or the LLM
    """
    from polypage.services.ai.client import get_lm
    from polypage.services.ai.translation import DspyTranslationBackend

    settings = settings or get_settings()
    try:
        lm = get_lm(settings)
    except ValueError as e:
        raise ConfigurationError(f"Translation model not configured: {e}") from e

    return build_pipeline(
        config,
        create_storage(settings),
        DspyTranslationBackend(settings, lm=lm),
        settings=settings,
    )
