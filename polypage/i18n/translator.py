"""
Content translator with caching.

Wraps a translation backend with the pipeline's failure policy: empty input
never reaches the backend, and a backend failure degrades to an empty string
instead of aborting the document. Callers decide what an empty result means
(drop a block, fall back to the original title, ...).
"""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod

from polypage.core.errors import TranslationError
from polypage.i18n.languages import Language, normalize_language_code

logger = logging.getLogger(__name__)


def _code(language: str | Language) -> str:
    if isinstance(language, Language):
        return language.value
    return normalize_language_code(language)


# =============================================================================
# Backend interface
# =============================================================================


class TranslationBackend(ABC):
    """Text in, translated text out."""

    @abstractmethod
    async def translate(self, text: str, source: str, target: str) -> str:
        """Translate text; raise on any service failure."""
        pass


# =============================================================================
# Translation Cache
# =============================================================================


class TranslationCache:
    """
    Hash-based in-memory translation cache.

    Titles and repeated paragraphs show up across documents and languages;
    the cache keeps one backend call per distinct (text, source, target).
    """

    def __init__(self):
        self._cache: dict[str, str] = {}

    def _make_key(self, text: str, source: str, target: str) -> str:
        """Create cache key from content hash."""
        content = f"{source}:{target}:{text}"
        return hashlib.sha256(content.encode()).hexdigest()[:16]

    def get(self, text: str, source: str, target: str) -> str | None:
        return self._cache.get(self._make_key(text, source, target))

    def set(self, text: str, source: str, target: str, translation: str) -> None:
        self._cache[self._make_key(text, source, target)] = translation

    def __len__(self) -> int:
        return len(self._cache)


# =============================================================================
# Content Translator
# =============================================================================


class ContentTranslator:
    """
    Translates single text payloads for the pipeline.

    Usage:
        translator = ContentTranslator(backend, source="en")
        fr_title = await translator.translate("Hello", "fr")   # "Bonjour"
        await translator.translate("", "fr")                    # "" (no call)
    """

    def __init__(
        self,
        backend: TranslationBackend,
        source: str | Language = "en",
        use_cache: bool = True,
    ):
        self.backend = backend
        self.source = _code(source)
        self.cache = TranslationCache() if use_cache else None

    async def translate(self, text: str | None, target: str | Language) -> str:
        """
        Translate text to the target language.

        Returns "" for empty input and for backend failures.
        """
        if not text or not text.strip():
            return ""

        target = _code(target)
        if target == self.source:
            return text

        if self.cache is not None:
            cached = self.cache.get(text, self.source, target)
            if cached is not None:
                return cached

        logger.info(f"Translating text to {target}: {text[:80]}")
        try:
            translation = (await self.backend.translate(text, self.source, target)).strip()
        except Exception as e:
            error = TranslationError(str(e), source=self.source, target=target)
            logger.warning(f"Translation to {target} failed, leaving value empty: {error}")
            return ""

        if self.cache is not None and translation:
            self.cache.set(text, self.source, target, translation)
        return translation
