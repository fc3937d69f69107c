# =============================================================================
# Notion Integration (content store)
# =============================================================================
#
# Setup:
#   1. Create an internal integration at https://www.notion.so/my-integrations
#   2. Share the source database and every destination database with it
#   3. Set env vars:
#      - NOTION_API_KEY=secret_...
#
# Database ids go in config/pipeline.yaml.
#
# =============================================================================

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from polypage.core.errors import EnumerationError, StoreReadError, StoreWriteError
from polypage.core.models import (
    CheckboxField,
    ContentUnit,
    DateField,
    FileRef,
    FilesField,
    ImageUnit,
    MultiSelectField,
    Page,
    RichTextField,
    SelectField,
    SourceDocument,
    TextUnit,
    TitleField,
    TypedField,
    UrlField,
)
from polypage.storage.base import DocumentStorage

logger = logging.getLogger(__name__)

# API limits
MAX_RICH_TEXT_LENGTH = 2000
MAX_CHILDREN_PER_APPEND = 100


# =============================================================================
# Property mapping
# =============================================================================


def _plain_text(rich_text: list[dict[str, Any]]) -> str:
    parts = []
    for segment in rich_text or []:
        if "plain_text" in segment:
            parts.append(segment["plain_text"])
        else:
            parts.append(segment.get("text", {}).get("content", ""))
    return "".join(parts)


def rich_text_payload(text: str) -> list[dict[str, Any]]:
    """Split text into rich-text segments that fit the per-segment limit."""
    return [
        {"type": "text", "text": {"content": text[i:i + MAX_RICH_TEXT_LENGTH]}}
        for i in range(0, len(text), MAX_RICH_TEXT_LENGTH)
    ]


def parse_property(prop: dict[str, Any]) -> TypedField | None:
    """
    Map a Notion property value to a typed field.

    Returns None for empty values (no date, no select, no url) and for
    property types the pipeline does not carry (formulas, relations, ...).
    """
    kind = prop.get("type")
    field_id = prop.get("id")
    value = prop.get(kind)

    if kind == "title":
        return TitleField(text=_plain_text(value), field_id=field_id)
    if kind == "rich_text":
        return RichTextField(text=_plain_text(value), field_id=field_id)
    if kind == "checkbox":
        return CheckboxField(checked=bool(value), field_id=field_id)
    if kind == "date":
        if not value:
            return None
        return DateField(start=value["start"], end=value.get("end"), field_id=field_id)
    if kind == "multi_select":
        return MultiSelectField(names=[o["name"] for o in value or []], field_id=field_id)
    if kind == "select":
        if not value:
            return None
        return SelectField(name=value.get("name", ""), field_id=field_id)
    if kind == "files":
        files = [
            FileRef(name=f.get("name", ""), type=f["type"], url=f[f["type"]]["url"])
            for f in value or []
        ]
        return FilesField(files=files, field_id=field_id)
    if kind == "url":
        if not value:
            return None
        return UrlField(url=value, field_id=field_id)
    return None


def property_payload(field: TypedField) -> dict[str, Any]:
    """Map a typed field to the Notion property value used on writes."""
    if isinstance(field, TitleField):
        payload: dict[str, Any] = {"title": rich_text_payload(field.text)}
    elif isinstance(field, RichTextField):
        payload = {"rich_text": rich_text_payload(field.text)}
    elif isinstance(field, CheckboxField):
        payload = {"checkbox": field.checked}
    elif isinstance(field, DateField):
        date: dict[str, Any] = {"start": field.start}
        if field.end:
            date["end"] = field.end
        payload = {"date": date}
    elif isinstance(field, MultiSelectField):
        payload = {"multi_select": [{"name": n} for n in field.names]}
    elif isinstance(field, SelectField):
        payload = {"select": {"name": field.name}}
    elif isinstance(field, FilesField):
        payload = {
            "files": [
                {"name": f.name, "type": f.type, f.type: {"url": f.url}}
                for f in field.files
            ]
        }
    elif isinstance(field, UrlField):
        payload = {"url": field.url}
    else:
        raise TypeError(f"Unsupported field: {field!r}")

    if field.field_id:
        payload["id"] = field.field_id
    return payload


def parse_page(page: dict[str, Any]) -> SourceDocument:
    fields: dict[str, TypedField] = {}
    for name, prop in page.get("properties", {}).items():
        field = parse_property(prop)
        if field is not None:
            fields[name] = field
    return SourceDocument(
        id=page["id"],
        url=page.get("url", ""),
        fields=fields,
        created_time=page.get("created_time"),
    )


# =============================================================================
# Block mapping
# =============================================================================


def parse_block(block: dict[str, Any]) -> ContentUnit:
    """
    Map a Notion block to a content unit.

    Images keep both possible sources; every other block type becomes a
    text unit made of its rich-text runs (possibly none).
    """
    kind = block.get("type", "paragraph")
    body = block.get(kind) or {}

    if kind == "image":
        file_url = (body.get("file") or {}).get("url")
        external_url = (body.get("external") or {}).get("url")
        return ImageUnit(file_url=file_url, external_url=external_url)

    runs = []
    if isinstance(body, dict):
        runs = [_plain_text([segment]) for segment in body.get("rich_text", [])]
    return TextUnit(kind=kind, runs=runs)


def block_payload(unit: ContentUnit) -> dict[str, Any]:
    if isinstance(unit, ImageUnit):
        return {
            "object": "block",
            "type": "image",
            "image": {"type": "external", "external": {"url": unit.source_url}},
        }
    return {
        "object": "block",
        "type": unit.kind,
        unit.kind: {"rich_text": rich_text_payload(unit.text)},
    }


# =============================================================================
# Client
# =============================================================================


def _is_rate_limited(exc: BaseException) -> bool:
    return (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response.status_code == 429
    )


def _describe(exc: httpx.HTTPError) -> str:
    """Human-readable reason, using Notion's error message when present."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            message = exc.response.json().get("message")
        except ValueError:
            message = None
        return f"{exc.response.status_code} {message or exc.response.reason_phrase}"
    return str(exc) or exc.__class__.__name__


class NotionDocumentStorage(DocumentStorage):
    """Notion databases, pages and blocks over the public REST API."""

    def __init__(
        self,
        api_key: str,
        notion_version: str = "2022-06-28",
        base_url: str = "https://api.notion.com/v1",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.http = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            },
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    @retry(
        retry=retry_if_exception(_is_rate_limited),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self.http.request(method, path, json=json, params=params)
        response.raise_for_status()
        return response.json()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def query_collection(
        self,
        collection_id: str,
        cursor: str | None = None,
        page_size: int = 100,
    ) -> Page:
        body: dict[str, Any] = {"page_size": page_size}
        if cursor:
            body["start_cursor"] = cursor
        try:
            data = await self._send("POST", f"/databases/{collection_id}/query", json=body)
        except httpx.HTTPError as e:
            raise EnumerationError(
                collection_id, f"Could not query database {collection_id}: {_describe(e)}"
            ) from e

        try:
            items = [parse_page(p) for p in data.get("results", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise EnumerationError(
                collection_id, f"Unexpected page shape in database {collection_id}: {e!r}"
            ) from e
        return Page(
            items=items,
            next_cursor=data.get("next_cursor"),
            has_more=bool(data.get("has_more")),
        )

    async def get_document(self, document_id: str) -> SourceDocument:
        try:
            data = await self._send("GET", f"/pages/{document_id}")
        except httpx.HTTPError as e:
            raise StoreReadError("get_document", document_id, _describe(e)) from e
        return parse_page(data)

    async def list_raw_children(self, document_id: str) -> list[dict[str, Any]]:
        """All child blocks, following the cursor until the last page."""
        blocks: list[dict[str, Any]] = []
        cursor: str | None = None
        while True:
            params: dict[str, Any] = {"page_size": 100}
            if cursor:
                params["start_cursor"] = cursor
            try:
                data = await self._send("GET", f"/blocks/{document_id}/children", params=params)
            except httpx.HTTPError as e:
                raise StoreReadError("list_content_units", document_id, _describe(e)) from e
            blocks.extend(data.get("results", []))
            if not data.get("has_more"):
                return blocks
            cursor = data.get("next_cursor")

    async def list_content_units(self, document_id: str) -> list[ContentUnit]:
        return [parse_block(b) for b in await self.list_raw_children(document_id)]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_document(self, collection_id: str, fields: dict[str, TypedField]) -> str:
        body = {
            "parent": {"database_id": collection_id},
            "properties": {name: property_payload(f) for name, f in fields.items()},
        }
        try:
            data = await self._send("POST", "/pages", json=body)
        except httpx.HTTPError as e:
            raise StoreWriteError("create_document", collection_id, _describe(e)) from e
        logger.info(f"Created page {data['id']} in database {collection_id}")
        return data["id"]

    async def update_document_fields(self, document_id: str, fields: dict[str, TypedField]) -> None:
        body = {"properties": {name: property_payload(f) for name, f in fields.items()}}
        try:
            await self._send("PATCH", f"/pages/{document_id}", json=body)
        except httpx.HTTPError as e:
            raise StoreWriteError("update_document_fields", document_id, _describe(e)) from e

    async def append_content_units(self, document_id: str, units: list[ContentUnit]) -> None:
        children = [block_payload(u) for u in units]
        for start in range(0, len(children), MAX_CHILDREN_PER_APPEND):
            batch = children[start:start + MAX_CHILDREN_PER_APPEND]
            try:
                await self._send(
                    "PATCH", f"/blocks/{document_id}/children", json={"children": batch}
                )
            except httpx.HTTPError as e:
                raise StoreWriteError("append_content_units", document_id, _describe(e)) from e
        logger.info(f"Appended {len(children)} blocks to page {document_id}")
