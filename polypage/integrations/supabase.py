# =============================================================================
# Supabase Integration (image bucket + translation records)
# =============================================================================
#
# Setup:
#   1. Create a project at https://supabase.com
#   2. Create a public storage bucket (default name: "ppt")
#   3. Create the records table:
#        create table translations (
#          id text primary key,
#          source_url text,
#          fr_url text, es_url text, de_url text, it_url text
#        );
#      One <lang>_url column per language in config/pipeline.yaml.
#   4. Set env vars:
#      - SUPABASE_URL=https://<project>.supabase.co
#      - SUPABASE_KEY=<service role key>
#
# =============================================================================

import logging
from typing import Any
from urllib.parse import quote

import httpx

from polypage.core.errors import DuplicateRecordError, StoreReadError, StoreWriteError
from polypage.core.models import TranslationRecord
from polypage.storage.base import ContentStorage, RecordStorage

logger = logging.getLogger(__name__)

URL_COLUMN_SUFFIX = "_url"


def _headers(key: str) -> dict[str, str]:
    return {"apikey": key, "Authorization": f"Bearer {key}"}


def _reason(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"{response.status_code} {response.text[:200]}"
    message = body.get("message") or body.get("error") or body
    return f"{response.status_code} {message}"


def create_supabase_client(url: str, key: str, timeout: float = 60.0) -> httpx.AsyncClient:
    """One HTTP client shared by the storage and records backends."""
    return httpx.AsyncClient(base_url=url.rstrip("/"), headers=_headers(key), timeout=timeout)


# =============================================================================
# Storage bucket
# =============================================================================


class SupabaseContentStorage(ContentStorage):
    """Objects in a public Supabase Storage bucket."""

    def __init__(self, client: httpx.AsyncClient, bucket: str = "ppt"):
        self.http = client
        self.bucket = bucket

    def _object_path(self, key: str) -> str:
        return f"/storage/v1/object/{self.bucket}/{quote(key)}"

    async def aclose(self) -> None:
        await self.http.aclose()

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        logger.info(f"Uploading {key} to bucket {self.bucket}")
        try:
            response = await self.http.post(
                self._object_path(key),
                content=data,
                headers={"Content-Type": content_type},
            )
        except httpx.HTTPError as e:
            raise StoreWriteError("upload", key, f"Error uploading to Supabase: {e}") from e
        if response.is_error:
            raise StoreWriteError(
                "upload", key, f"Error uploading to Supabase: {_reason(response)}"
            )
        return key

    async def get(self, key: str) -> bytes:
        try:
            response = await self.http.get(self._object_path(key))
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreReadError("download", key, str(e)) from e
        return response.content

    async def delete(self, key: str) -> bool:
        try:
            response = await self.http.delete(self._object_path(key))
        except httpx.HTTPError as e:
            raise StoreWriteError("delete", key, str(e)) from e
        return response.is_success

    async def get_url(self, key: str) -> str:
        """Public buckets serve objects at a stable, unsigned URL."""
        base = str(self.http.base_url).rstrip("/")
        return f"{base}/storage/v1/object/public/{self.bucket}/{quote(key)}"


# =============================================================================
# Records table
# =============================================================================


class SupabaseRecordStorage(RecordStorage):
    """Translation records in a PostgREST table with one url column per language."""

    def __init__(self, client: httpx.AsyncClient, table: str = "translations"):
        self.http = client
        self.table = table

    @property
    def _path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def aclose(self) -> None:
        await self.http.aclose()

    async def insert_record(self, record_id: str, source_url: str) -> None:
        try:
            response = await self.http.post(
                self._path,
                json={"id": record_id, "source_url": source_url},
                headers={"Prefer": "return=minimal"},
            )
        except httpx.HTTPError as e:
            raise StoreWriteError("insert_record", record_id, str(e)) from e
        if response.status_code == 409:
            raise DuplicateRecordError(record_id)
        if response.is_error:
            raise StoreWriteError("insert_record", record_id, _reason(response))

    async def update_record(self, record_id: str, urls: dict[str, str]) -> None:
        columns = {f"{lang}{URL_COLUMN_SUFFIX}": url for lang, url in urls.items()}
        try:
            response = await self.http.patch(
                self._path,
                params={"id": f"eq.{record_id}"},
                json=columns,
                headers={"Prefer": "return=minimal"},
            )
        except httpx.HTTPError as e:
            raise StoreWriteError("update_record", record_id, str(e)) from e
        if response.is_error:
            raise StoreWriteError("update_record", record_id, _reason(response))

    async def get_record(self, record_id: str) -> TranslationRecord | None:
        try:
            response = await self.http.get(
                self._path, params={"id": f"eq.{record_id}", "select": "*"}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreReadError("get_record", record_id, str(e)) from e

        rows: list[dict[str, Any]] = response.json()
        if not rows:
            return None
        row = rows[0]
        urls = {
            column[: -len(URL_COLUMN_SUFFIX)]: value
            for column, value in row.items()
            if column.endswith(URL_COLUMN_SUFFIX) and column != "source_url" and value
        }
        return TranslationRecord(id=row["id"], source_url=row.get("source_url") or "", urls=urls)
