"""
Image relocation.

Images embedded in source pages are hosted by the content store under
short-lived signed URLs, so destination pages cannot simply point at them.
Each image is downloaded to a scratch file, uploaded to the blob store and
replaced by the blob store's public URL.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from polypage.core.errors import FetchError
from polypage.core.utils import random_suffix
from polypage.storage.base import ContentStorage

logger = logging.getLogger(__name__)


class ImageRelocator:
    """
    Copies a remote image into durable storage.

    Download is retried with a fixed delay; upload is not. The scratch file
    is removed whether relocation succeeds or fails.
    """

    content_type = "image/jpeg"

    def __init__(
        self,
        storage: ContentStorage,
        http: httpx.AsyncClient | None = None,
        scratch_dir: str | Path = "./data/scratch",
        attempts: int = 3,
        delay_seconds: float = 2.0,
    ):
        self.storage = storage
        self.http = http or httpx.AsyncClient(timeout=60.0, follow_redirects=True)
        self.scratch_dir = Path(scratch_dir)
        self.attempts = attempts
        self.delay_seconds = delay_seconds

    async def aclose(self) -> None:
        await self.http.aclose()

    def _scratch_name(self) -> str:
        return f"image_{random_suffix(10)}.jpg"

    async def _download(self, url: str, path: Path) -> None:
        async with self.http.stream("GET", url) as response:
            if response.is_error:
                raise httpx.HTTPStatusError(
                    f"Failed to fetch image: {response.status_code} {response.reason_phrase}",
                    request=response.request,
                    response=response,
                )
            with open(path, "wb") as f:
                async for chunk in response.aiter_bytes():
                    f.write(chunk)

    async def _download_with_retry(self, url: str, path: Path) -> None:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.delay_seconds),
            retry=retry_if_exception_type((httpx.HTTPError, OSError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await self._download(url, path)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise FetchError(
                url,
                self.attempts,
                f"Failed to download image after {self.attempts} attempts: {cause}",
            ) from cause
        except httpx.InvalidURL as e:
            # Malformed URLs never succeed; fail on the first attempt.
            raise FetchError(url, 1, f"Invalid image URL {url!r}: {e}") from e

    async def relocate(self, source_url: str) -> str:
        """
        Re-host the image at source_url and return its durable URL.

        Raises:
            FetchError: the image could not be downloaded
            StoreWriteError: the blob store rejected the upload
        """
        name = self._scratch_name()
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        path = self.scratch_dir / name

        logger.info(f"Downloading image from URL: {source_url}")
        try:
            await self._download_with_retry(source_url, path)
            await self.storage.put(name, path.read_bytes(), content_type=self.content_type)
            url = await self.storage.get_url(name)
        finally:
            if path.exists():
                path.unlink()

        logger.info(f"Uploaded image available at: {url}")
        return url
