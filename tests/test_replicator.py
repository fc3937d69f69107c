"""
Tests for replicating one document into one destination collection.
"""

import pytest

from polypage.core.errors import ReplicationError, StoreWriteError
from polypage.core.models import (
    CheckboxField,
    ImageUnit,
    MultiSelectField,
    RichTextField,
    TextUnit,
    TitleField,
)
from polypage.services.replicator import PageReplicator
from polypage.services.units import ContentUnitTranslator

from conftest import SOURCE_DB, make_doc


class TestReplicate:
    @pytest.mark.asyncio
    async def test_hello_world(self, replicator, documents, hello_doc):
        result = await replicator.replicate(hello_doc, "fr", "fr-db")

        created = documents.documents_in("fr-db")
        assert len(created) == 1
        page = created[0]
        assert page.id == result.destination_id
        assert page.fields["Name"] == TitleField(text="Bonjour", field_id="title")
        assert page.fields["Desc"] == RichTextField(text="Monde", field_id="d%3Ae")
        assert page.fields["Published"].checked is True

        units = await documents.list_content_units(result.destination_id)
        assert units == [TextUnit(kind="paragraph", runs=["Bonjour"])]
        assert result.appended_units == 1
        assert result.title == "Bonjour"

    @pytest.mark.asyncio
    async def test_destination_url(self, replicator, hello_doc):
        result = await replicator.replicate(hello_doc, "fr", "fr-db")
        expected_id = result.destination_id.replace("-", "")
        assert result.destination_url == f"https://www.notion.so/Bonjour-{expected_id}"

    @pytest.mark.asyncio
    async def test_source_untouched(self, replicator, documents, hello_doc):
        await replicator.replicate(hello_doc, "fr", "fr-db")

        source = await documents.get_document("doc-hello")
        assert source.text_of("Name") == "Hello"
        assert await documents.list_content_units("doc-hello") == [
            TextUnit(kind="paragraph", runs=["Hello"])
        ]

    @pytest.mark.asyncio
    async def test_unit_order_preserved_and_drops_skipped(
        self, replicator, documents, backend, image_unit
    ):
        backend.failures.add(("Broken", "fr"))
        doc = documents.add_document(
            SOURCE_DB,
            make_doc("doc-mixed"),
            units=[
                TextUnit(kind="heading_1", runs=["Hello"]),
                TextUnit(kind="paragraph", runs=["Broken"]),
                image_unit,
                ImageUnit(),
                TextUnit(kind="bulleted_list_item", runs=["World"]),
            ],
        )

        result = await replicator.replicate(doc, "fr", "fr-db")

        units = await documents.list_content_units(result.destination_id)
        assert [u.type for u in units] == ["text", "image", "text"]
        assert units[0] == TextUnit(kind="heading_1", runs=["Bonjour"])
        assert units[1].external_url.startswith("file://")
        assert units[2] == TextUnit(kind="bulleted_list_item", runs=["Monde"])

    @pytest.mark.asyncio
    async def test_copies_other_fields(self, replicator, documents):
        tags = MultiSelectField(names=["python", "notion"], field_id="tg")
        doc = documents.add_document(SOURCE_DB, make_doc("doc-tags", Tags=tags))

        result = await replicator.replicate(doc, "fr", "fr-db")

        page = await documents.get_document(result.destination_id)
        assert page.fields["Tags"] == tags
        assert "Date" not in page.fields
        assert "OGimage" not in page.fields

    @pytest.mark.asyncio
    async def test_published_copied_from_source(self, replicator, documents):
        doc = documents.add_document(SOURCE_DB, make_doc("doc-draft", published=False))
        result = await replicator.replicate(doc, "fr", "fr-db")

        page = await documents.get_document(result.destination_id)
        assert page.fields["Published"] == CheckboxField(checked=False, field_id="pub")


class TestHeaderFallbacks:
    @pytest.mark.asyncio
    async def test_title_falls_back_to_original(self, replicator, backend, hello_doc):
        backend.failures.add(("Hello", "fr"))
        title, description = await replicator.translate_header(hello_doc, "fr")
        assert title == "Hello"
        assert description == "Monde"

    @pytest.mark.asyncio
    async def test_title_placeholder_when_empty(self, replicator, backend):
        doc = make_doc("doc-blank", title="")
        title, _ = await replicator.translate_header(doc, "fr")
        assert title == "Untitled"
        assert ("", "en", "fr") not in backend.calls

    @pytest.mark.asyncio
    async def test_whitespace_title_gets_placeholder(self, replicator, documents, backend):
        doc = documents.add_document(SOURCE_DB, make_doc("doc-ws", title="   ", desc="  \n"))

        result = await replicator.replicate(doc, "fr", "fr-db")

        page = await documents.get_document(result.destination_id)
        assert page.fields["Name"].text == "Untitled"
        assert page.fields["Desc"].text == ""
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_description_falls_back_to_original(self, replicator, backend, hello_doc):
        backend.empty.add(("World", "fr"))
        _, description = await replicator.translate_header(hello_doc, "fr")
        assert description == "World"

    @pytest.mark.asyncio
    async def test_missing_description_is_empty(self, replicator, backend):
        doc = make_doc("doc-nodesc", desc="")
        _, description = await replicator.translate_header(doc, "fr")
        assert description == ""
        assert all(call[0] != "" for call in backend.calls)


class TestBody:
    @pytest.mark.asyncio
    async def test_no_append_when_nothing_survives(self, replicator, documents, backend):
        backend.failures.add(("Gone", "fr"))
        doc = documents.add_document(
            SOURCE_DB,
            make_doc("doc-gone"),
            units=[TextUnit(runs=["Gone"]), ImageUnit()],
        )
        appended = []
        original = documents.append_content_units

        async def spy(document_id, units):
            appended.append(units)
            await original(document_id, units)

        documents.append_content_units = spy

        result = await replicator.replicate(doc, "fr", "fr-db")

        assert appended == []
        assert result.appended_units == 0

    @pytest.mark.asyncio
    async def test_single_append_call(self, replicator, documents):
        doc = documents.add_document(
            SOURCE_DB,
            make_doc("doc-long"),
            units=[TextUnit(runs=[f"Line {i}"]) for i in range(20)],
        )
        calls = []
        original = documents.append_content_units

        async def spy(document_id, units):
            calls.append(len(units))
            await original(document_id, units)

        documents.append_content_units = spy

        await replicator.replicate(doc, "fr", "fr-db")
        assert calls == [20]


class TestFailures:
    @pytest.mark.asyncio
    async def test_upload_failure_aborts_replication(self, documents, translator, image_unit):
        class RejectingRelocator:
            async def relocate(self, url):
                raise StoreWriteError("upload", "image.jpg", "Error uploading to Supabase: 413")

        replicator = PageReplicator(
            documents, translator, ContentUnitTranslator(translator, RejectingRelocator())
        )
        documents.add_document(SOURCE_DB, make_doc("doc-img"), units=[image_unit])
        doc = await documents.get_document("doc-img")

        with pytest.raises(ReplicationError) as exc_info:
            await replicator.replicate(doc, "fr", "fr-db")

        assert exc_info.value.language == "fr"
        assert "Error uploading to Supabase" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_create_failure_wrapped(self, replicator, documents, hello_doc):
        async def refuse(collection_id, fields):
            raise StoreWriteError("create_document", collection_id, "validation_error")

        documents.create_document = refuse

        with pytest.raises(ReplicationError) as exc_info:
            await replicator.replicate(hello_doc, "fr", "fr-db")
        assert exc_info.value.reason == "validation_error"


class TestDestinationUrl:
    def test_slug_and_compact_id(self, replicator):
        url = replicator.destination_url("Bonjour le monde", "1234-ABCD", "fr")
        assert url == "https://www.notion.so/Bonjour-le-monde-1234abcd"

    def test_accents_folded(self, replicator):
        url = replicator.destination_url("Été à Paris", "abcd", "fr")
        assert url == "https://www.notion.so/Ete-a-Paris-abcd"

    def test_non_latin_title_gives_id_only(self, replicator):
        assert replicator.destination_url("こんにちは", "abcd", "ja") == "https://www.notion.so/abcd"

    def test_id_only_language(self, documents, translator, unit_translator):
        replicator = PageReplicator(
            documents,
            translator,
            unit_translator,
            site_base_url="https://pages.example.com/",
            id_only_url_languages=["de"],
        )
        assert replicator.destination_url("Hallo", "ab-cd", "de") == "https://pages.example.com/abcd"
        assert replicator.destination_url("Hola", "ab-cd", "es") == "https://pages.example.com/Hola-abcd"
