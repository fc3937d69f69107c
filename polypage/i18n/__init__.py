"""
Internationalization - text translation for the pipeline.

Design:
1. A backend does the actual translation (LLM via dspy in production)
2. ContentTranslator applies the failure policy: empty in, empty out;
   backend errors degrade to ""
3. Results are cached by content hash for the lifetime of a run

Usage:
    from polypage.i18n import ContentTranslator

    translator = ContentTranslator(backend, source="en")
    text_fr = await translator.translate("Hello world", "fr")
"""

from polypage.i18n.translator import (
    ContentTranslator,
    TranslationBackend,
    TranslationCache,
)
from polypage.i18n.languages import (
    Language,
    LANGUAGE_NAMES,
    get_language_name,
    normalize_language_code,
)

__all__ = [
    "ContentTranslator",
    "TranslationBackend",
    "TranslationCache",
    "Language",
    "LANGUAGE_NAMES",
    "get_language_name",
    "normalize_language_code",
]
