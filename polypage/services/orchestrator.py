"""
Batch orchestration.

Walks the whole source collection, picks documents by a filter policy and
replicates each one into every requested language. One failing (document,
language) pair never stops the others; every attempt ends up in the report.
"""

from __future__ import annotations

import logging
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from polypage.core.errors import DuplicateRecordError, PolypageError, ReplicationError
from polypage.core.models import Outcome, RunReport, SourceDocument
from polypage.core.utils import compact_id
from polypage.services.replicator import PageReplicator
from polypage.storage.base import DocumentStorage, RecordStorage

logger = logging.getLogger(__name__)


# =============================================================================
# Filter Policies
# =============================================================================


class PublishedFilter(BaseModel):
    """Documents whose published flag is set, first `limit` in listing order."""

    mode: Literal["published"] = "published"
    limit: int | None = Field(default=None, ge=0)

    def select(self, docs: list[SourceDocument], published_field: str | None) -> list[SourceDocument]:
        if published_field is None:
            return []
        selected = [d for d in docs if d.is_checked(published_field)]
        return selected if self.limit is None else selected[: self.limit]


class AllowListFilter(BaseModel):
    """Documents whose id is listed, regardless of their published flag."""

    mode: Literal["allow_list"] = "allow_list"
    ids: list[str] = Field(default_factory=list)

    def select(self, docs: list[SourceDocument], published_field: str | None) -> list[SourceDocument]:
        allowed = {compact_id(i) for i in self.ids}
        return [d for d in docs if compact_id(d.id) in allowed]


FilterPolicy = Annotated[Union[PublishedFilter, AllowListFilter], Field(discriminator="mode")]


# =============================================================================
# Orchestrator
# =============================================================================


class BatchOrchestrator:
    """
    Drives PageReplicator over documents × languages.

    Usage:
        orchestrator = BatchOrchestrator(
            documents, records, replicator,
            source_collection_id="0b66...",
            destinations={"fr": "0056...", "es": "14a3..."},
        )
        report = await orchestrator.run(PublishedFilter(limit=5))
        report.error_messages
    """

    def __init__(
        self,
        documents: DocumentStorage,
        records: RecordStorage,
        replicator: PageReplicator,
        source_collection_id: str,
        destinations: dict[str, str],
        page_size: int = 100,
    ):
        self.documents = documents
        self.records = records
        self.replicator = replicator
        self.source_collection_id = source_collection_id
        self.destinations = dict(destinations)
        self.page_size = page_size

    async def enumerate(self) -> list[SourceDocument]:
        """
        Every document of the source collection, across all pages.

        Raises:
            EnumerationError: the collection could not be listed
        """
        docs: list[SourceDocument] = []
        cursor: str | None = None
        pages = 0
        while True:
            page = await self.documents.query_collection(
                self.source_collection_id, cursor=cursor, page_size=self.page_size
            )
            pages += 1
            docs.extend(page.items)
            if not page.has_more or not page.next_cursor:
                break
            cursor = page.next_cursor
        logger.info(f"Enumerated {len(docs)} documents in {pages} pages")
        return docs

    async def run(
        self,
        filter_policy: PublishedFilter | AllowListFilter,
        languages: list[str] | None = None,
    ) -> RunReport:
        """
        Replicate every selected document into every language.

        Only an enumeration failure propagates; everything else is recorded
        in the returned report.
        """
        languages = list(languages) if languages is not None else list(self.destinations)
        docs = filter_policy.select(
            await self.enumerate(), self.replicator.schema.published_field
        )
        logger.info(f"Processing {len(docs)} documents into {', '.join(languages)}")

        report = RunReport()
        for doc in docs:
            await self.process_document(doc, languages, report)

        logger.info(
            f"Run finished: {len(report.success_messages)} succeeded, "
            f"{len(report.error_messages)} failed, {len(report.skipped)} skipped"
        )
        return report

    async def process_document(
        self,
        doc: SourceDocument,
        languages: list[str],
        report: RunReport,
    ) -> None:
        try:
            await self.records.insert_record(doc.id, doc.url)
        except DuplicateRecordError:
            logger.warning(f"Translation record for {doc.id} already exists, skipping")
            report.skipped.append(doc.id)
            return
        except PolypageError as e:
            logger.warning(f"Could not create translation record for {doc.id}, skipping: {e}")
            report.skipped.append(doc.id)
            return

        for language in languages:
            outcome = await self.process_language(doc, language)
            if not outcome.ok:
                logger.error(outcome.message)
            report.record(outcome)

    async def process_language(self, doc: SourceDocument, language: str) -> Outcome:
        collection_id = self.destinations.get(language)
        if collection_id is None:
            return Outcome.failure(doc.id, language, f"No destination database for {language}")

        try:
            result = await self.replicator.replicate(doc, language, collection_id)
        except ReplicationError as e:
            return Outcome.failure(doc.id, language, e.reason)

        try:
            await self.records.update_record(doc.id, {language: result.destination_url})
        except PolypageError as e:
            return Outcome.failure(
                doc.id,
                language,
                f"created {result.destination_id} but could not record its url: {e}",
            )
        return Outcome.success(doc.id, language, result.destination_id, result.destination_url)
