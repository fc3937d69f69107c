"""
Tests for the Notion document store: property mapping and REST calls.

HTTP traffic is served by httpx.MockTransport; nothing reaches Notion.
"""

import json

import httpx
import pytest

from polypage.core.errors import EnumerationError, StoreWriteError
from polypage.core.models import (
    CheckboxField,
    DateField,
    FileRef,
    FilesField,
    ImageUnit,
    MultiSelectField,
    RichTextField,
    SelectField,
    TextUnit,
    TitleField,
    UrlField,
)
from polypage.integrations.notion import (
    MAX_RICH_TEXT_LENGTH,
    NotionDocumentStorage,
    block_payload,
    parse_block,
    parse_page,
    parse_property,
    property_payload,
    rich_text_payload,
)


def notion_page(page_id="5b445229-1b69-47a4-be62-d664c674118b", **properties):
    return {
        "object": "page",
        "id": page_id,
        "url": f"https://www.notion.so/Hello-{page_id.replace('-', '')}",
        "created_time": "2024-03-01T10:00:00.000Z",
        "properties": properties,
    }


TITLE_PROP = {"id": "title", "type": "title", "title": [{"plain_text": "Hello"}]}
PUBLISHED_PROP = {"id": "pub", "type": "checkbox", "checkbox": True}


class NotionStub:
    """Routes requests to canned JSON responses and remembers them."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path.removeprefix("/v1"))
        response = self.routes[key]
        if callable(response):
            response = response(request)
        return response

    def body(self, index):
        return json.loads(self.requests[index].content)


def make_store(stub):
    client = httpx.AsyncClient(
        base_url="https://api.notion.com/v1",
        transport=httpx.MockTransport(stub),
    )
    return NotionDocumentStorage(api_key="secret", client=client)


class TestPropertyMapping:
    def test_title_joins_segments(self):
        field = parse_property(
            {"id": "title", "type": "title", "title": [{"plain_text": "Hel"}, {"plain_text": "lo"}]}
        )
        assert field == TitleField(text="Hello", field_id="title")

    def test_empty_values_are_absent(self):
        assert parse_property({"id": "d", "type": "date", "date": None}) is None
        assert parse_property({"id": "s", "type": "select", "select": None}) is None
        assert parse_property({"id": "u", "type": "url", "url": None}) is None

    def test_unsupported_types_ignored(self):
        assert parse_property({"id": "f", "type": "formula", "formula": {"number": 3}}) is None

    def test_files(self):
        field = parse_property({
            "id": "fm",
            "type": "files",
            "files": [
                {"name": "a.pdf", "type": "file", "file": {"url": "https://s3/a.pdf", "expiry_time": "x"}},
                {"name": "b", "type": "external", "external": {"url": "https://b"}},
            ],
        })
        assert field.files == [
            FileRef(name="a.pdf", type="file", url="https://s3/a.pdf"),
            FileRef(name="b", type="external", url="https://b"),
        ]

    def test_payload_carries_field_id(self):
        payload = property_payload(RichTextField(text="Monde", field_id="d%3Ae"))
        assert payload == {
            "rich_text": [{"type": "text", "text": {"content": "Monde"}}],
            "id": "d%3Ae",
        }

    def test_payload_without_field_id(self):
        assert property_payload(CheckboxField(checked=True)) == {"checkbox": True}

    @pytest.mark.parametrize(
        "field",
        [
            TitleField(text="Bonjour", field_id="title"),
            CheckboxField(checked=False, field_id="pub"),
            DateField(start="2024-03-01", field_id="dt"),
            MultiSelectField(names=["a", "b"], field_id="tg"),
            SelectField(name="Guides", field_id="cat"),
            UrlField(url="https://example.com/og.png", field_id="og"),
        ],
    )
    def test_payload_parses_back(self, field):
        payload = property_payload(field)
        payload["type"] = field.kind
        assert parse_property(payload) == field

    def test_long_text_split(self):
        segments = rich_text_payload("x" * (MAX_RICH_TEXT_LENGTH * 2 + 5))
        assert [len(s["text"]["content"]) for s in segments] == [2000, 2000, 5]

    def test_empty_text_has_no_segments(self):
        assert rich_text_payload("") == []

    def test_parse_page(self):
        doc = parse_page(notion_page(
            Name=TITLE_PROP,
            Published=PUBLISHED_PROP,
            Date={"id": "dt", "type": "date", "date": None},
        ))
        assert doc.id == "5b445229-1b69-47a4-be62-d664c674118b"
        assert list(doc.fields) == ["Name", "Published"]
        assert doc.is_checked("Published")
        assert doc.created_time == "2024-03-01T10:00:00.000Z"


class TestBlockMapping:
    def test_text_block(self):
        unit = parse_block({
            "type": "heading_2",
            "heading_2": {"rich_text": [{"plain_text": "Hello "}, {"plain_text": "there"}]},
        })
        assert unit == TextUnit(kind="heading_2", runs=["Hello ", "there"])

    def test_image_prefers_file(self):
        unit = parse_block({
            "type": "image",
            "image": {"type": "file", "file": {"url": "https://s3/signed.jpg"}},
        })
        assert unit == ImageUnit(file_url="https://s3/signed.jpg")
        assert unit.source_url == "https://s3/signed.jpg"

    def test_image_external(self):
        unit = parse_block({
            "type": "image",
            "image": {"type": "external", "external": {"url": "https://cdn/x.png"}},
        })
        assert unit.source_url == "https://cdn/x.png"

    def test_block_without_rich_text(self):
        assert parse_block({"type": "divider", "divider": {}}) == TextUnit(kind="divider")

    def test_text_payload(self):
        assert block_payload(TextUnit(kind="quote", runs=["Bonjour"])) == {
            "object": "block",
            "type": "quote",
            "quote": {"rich_text": [{"type": "text", "text": {"content": "Bonjour"}}]},
        }

    def test_image_payload_is_external(self):
        payload = block_payload(ImageUnit(external_url="https://bucket/image_1.jpg"))
        assert payload["image"] == {
            "type": "external",
            "external": {"url": "https://bucket/image_1.jpg"},
        }


class TestNotionDocumentStorage:
    @pytest.mark.asyncio
    async def test_query_sends_cursor_and_parses(self):
        stub = NotionStub({
            ("POST", "/databases/db1/query"): httpx.Response(200, json={
                "results": [notion_page(Name=TITLE_PROP, Published=PUBLISHED_PROP)],
                "next_cursor": "cur-2",
                "has_more": True,
            }),
        })
        store = make_store(stub)

        page = await store.query_collection("db1", cursor="cur-1", page_size=50)

        assert stub.body(0) == {"page_size": 50, "start_cursor": "cur-1"}
        assert stub.requests[0].headers["Authorization"] == "Bearer secret"
        assert stub.requests[0].headers["Notion-Version"] == "2022-06-28"
        assert page.has_more and page.next_cursor == "cur-2"
        assert page.items[0].text_of("Name") == "Hello"

    @pytest.mark.asyncio
    async def test_query_failure_is_enumeration_error(self):
        stub = NotionStub({
            ("POST", "/databases/db1/query"): httpx.Response(
                404, json={"object": "error", "message": "Could not find database"}
            ),
        })
        store = make_store(stub)

        with pytest.raises(EnumerationError) as exc_info:
            await store.query_collection("db1")
        assert "Could not find database" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self):
        responses = iter([
            httpx.Response(429, json={"message": "rate limited"}),
            httpx.Response(200, json={"results": [], "has_more": False, "next_cursor": None}),
        ])
        stub = NotionStub({("POST", "/databases/db1/query"): lambda request: next(responses)})
        store = make_store(stub)

        page = await store.query_collection("db1")

        assert page.items == []
        assert len(stub.requests) == 2

    @pytest.mark.asyncio
    async def test_create_document(self):
        stub = NotionStub({("POST", "/pages"): httpx.Response(200, json={"id": "new-page"})})
        store = make_store(stub)

        page_id = await store.create_document("fr-db", {"Published": CheckboxField(checked=True)})

        assert page_id == "new-page"
        assert stub.body(0) == {
            "parent": {"database_id": "fr-db"},
            "properties": {"Published": {"checkbox": True}},
        }

    @pytest.mark.asyncio
    async def test_update_fields(self):
        stub = NotionStub({("PATCH", "/pages/p1"): httpx.Response(200, json={"id": "p1"})})
        store = make_store(stub)

        await store.update_document_fields("p1", {"Name": TitleField(text="Bonjour", field_id="title")})

        assert stub.body(0)["properties"]["Name"]["title"][0]["text"]["content"] == "Bonjour"

    @pytest.mark.asyncio
    async def test_write_failure_is_store_write_error(self):
        stub = NotionStub({
            ("PATCH", "/pages/p1"): httpx.Response(
                400, json={"object": "error", "message": "Name is not a property"}
            ),
        })
        store = make_store(stub)

        with pytest.raises(StoreWriteError) as exc_info:
            await store.update_document_fields("p1", {"Name": TitleField(text="x")})
        assert "Name is not a property" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_append_batches_of_one_hundred(self):
        stub = NotionStub({
            ("PATCH", "/blocks/p1/children"): httpx.Response(200, json={"results": []}),
        })
        store = make_store(stub)

        await store.append_content_units("p1", [TextUnit(runs=[str(i)]) for i in range(150)])

        assert [len(stub.body(i)["children"]) for i in range(2)] == [100, 50]

    @pytest.mark.asyncio
    async def test_list_children_follows_cursor(self):
        pages = iter([
            {
                "results": [{"type": "paragraph", "paragraph": {"rich_text": [{"plain_text": "a"}]}}],
                "has_more": True,
                "next_cursor": "c2",
            },
            {
                "results": [{"type": "image", "image": {"file": {"url": "https://s3/x.jpg"}}}],
                "has_more": False,
                "next_cursor": None,
            },
        ])
        stub = NotionStub({
            ("GET", "/blocks/p1/children"): lambda request: httpx.Response(200, json=next(pages)),
        })
        store = make_store(stub)

        units = await store.list_content_units("p1")

        assert units == [TextUnit(runs=["a"]), ImageUnit(file_url="https://s3/x.jpg")]
        assert stub.requests[1].url.params["start_cursor"] == "c2"

    @pytest.mark.asyncio
    async def test_malformed_page_is_enumeration_error(self):
        broken_files = {"id": "fm", "type": "files", "files": [{"name": "a.pdf", "type": "file"}]}
        stub = NotionStub({
            ("POST", "/databases/db1/query"): httpx.Response(200, json={
                "results": [notion_page(Name=TITLE_PROP, FilesAndMedia=broken_files)],
                "has_more": False,
                "next_cursor": None,
            }),
        })
        store = make_store(stub)

        with pytest.raises(EnumerationError, match="Unexpected page shape"):
            await store.query_collection("db1")
