"""
Page replication.

Creates the translated copy of one source document in one destination
collection: an empty page first (the store needs an id before fields can be
updated), then the field set, then the translated body.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from polypage.core.errors import ReplicationError
from polypage.core.fields import FieldRole, FieldSchema, default_schema
from polypage.core.models import ContentUnit, SourceDocument
from polypage.core.utils import compact_id, slugify
from polypage.i18n.translator import ContentTranslator
from polypage.services.units import ContentUnitTranslator
from polypage.storage.base import DocumentStorage

logger = logging.getLogger(__name__)


class Replication(BaseModel):
    """What one successful replicate() call produced."""

    destination_id: str
    destination_url: str
    title: str
    appended_units: int = 0


class PageReplicator:
    """
    Replicates source documents into destination collections.

    Usage:
        replicator = PageReplicator(documents, translator, unit_translator)
        result = await replicator.replicate(doc, "fr", fr_database_id)
        result.destination_url
    """

    def __init__(
        self,
        documents: DocumentStorage,
        translator: ContentTranslator,
        unit_translator: ContentUnitTranslator,
        schema: FieldSchema | None = None,
        site_base_url: str = "https://www.notion.so",
        id_only_url_languages: list[str] | None = None,
        title_placeholder: str = "Untitled",
    ):
        self.documents = documents
        self.translator = translator
        self.unit_translator = unit_translator
        self.schema = schema or default_schema()
        self.site_base_url = site_base_url.rstrip("/")
        self.id_only_url_languages = set(id_only_url_languages or [])
        self.title_placeholder = title_placeholder

    async def replicate(
        self,
        doc: SourceDocument,
        target: str,
        collection_id: str,
    ) -> Replication:
        """
        Create the translated copy of doc in collection_id.

        Raises:
            ReplicationError: wrapping the first failure; nothing after the
                failing step is attempted
        """
        try:
            return await self._replicate(doc, target, collection_id)
        except ReplicationError:
            raise
        except Exception as e:
            raise ReplicationError(doc.id, target, str(e) or e.__class__.__name__) from e

    async def _replicate(
        self,
        doc: SourceDocument,
        target: str,
        collection_id: str,
    ) -> Replication:
        destination_id = await self.documents.create_document(
            collection_id, self.schema.initial_fields(published=True)
        )

        title, description = await self.translate_header(doc, target)
        fields = self.schema.build_write_back(doc, title=title, description=description)
        await self.documents.update_document_fields(destination_id, fields)
        logger.info(f"Translated page created in {target} with ID: {destination_id}")

        units = await self.translate_body(doc.id, target)
        if units:
            await self.documents.append_content_units(destination_id, units)

        url = self.destination_url(title, destination_id, target)
        logger.info(f"Page {doc.id} translated successfully to {target}")
        return Replication(
            destination_id=destination_id,
            destination_url=url,
            title=title,
            appended_units=len(units),
        )

    async def translate_header(self, doc: SourceDocument, target: str) -> tuple[str, str]:
        """
        Translated (title, description) with their fallbacks applied.

        Title: translation, else the original, else the placeholder.
        Description: translation, else the original, else "".
        """
        original_title = doc.text_of(self.schema.title_field)
        title = original_title
        if self.schema.translates(FieldRole.TITLE):
            title = await self.translator.translate(original_title, target)
        title = title.strip() or original_title.strip() or self.title_placeholder

        description = ""
        if self.schema.description_field is not None:
            original_description = doc.text_of(self.schema.description_field)
            description = original_description
            if self.schema.translates(FieldRole.DESCRIPTION):
                description = await self.translator.translate(original_description, target)
            description = description.strip() or original_description.strip()
        return title, description

    async def translate_body(self, document_id: str, target: str) -> list[ContentUnit]:
        """Translate every unit in order, one at a time, dropping Nones."""
        translated: list[ContentUnit] = []
        for unit in await self.documents.list_content_units(document_id):
            result = await self.unit_translator.translate_unit(unit, target)
            if result is not None:
                translated.append(result)
        return translated

    def destination_url(self, title: str, destination_id: str, target: str) -> str:
        """
        Best-effort public URL of a destination page.

        Languages listed in id_only_url_languages get a bare-id URL, as does
        any title that slugifies to nothing.
        """
        page_id = compact_id(destination_id)
        slug = "" if target in self.id_only_url_languages else slugify(title)
        if not slug:
            return f"{self.site_base_url}/{page_id}"
        return f"{self.site_base_url}/{slug}-{page_id}"
