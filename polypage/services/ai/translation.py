"""
LLM translation backend.

One DSPy signature, one Predict module, run against the LM built from
settings. The module is synchronous, so calls go through a worker thread
to keep the event loop free.
"""

from __future__ import annotations

import asyncio

import dspy

from polypage.config import Settings
from polypage.i18n.languages import get_language_name
from polypage.i18n.translator import TranslationBackend
from polypage.services.ai.client import get_lm


class TranslateText(dspy.Signature):
    """Translate text while preserving meaning, tone, and formatting. Return only the translation."""

    text: str = dspy.InputField(desc="Text to translate")
    source_language: str = dspy.InputField(desc="Source language name")
    target_language: str = dspy.InputField(desc="Target language name")

    translated_text: str = dspy.OutputField(desc="Translated text")


class DspyTranslationBackend(TranslationBackend):
    """Translation through a DSPy Predict module."""

    def __init__(self, settings: Settings | None = None, lm: dspy.LM | None = None):
        self._settings = settings
        self._lm = lm
        self._module: dspy.Predict | None = None

    @property
    def lm(self) -> dspy.LM:
        if self._lm is None:
            self._lm = get_lm(self._settings)
        return self._lm

    @property
    def module(self) -> dspy.Predict:
        if self._module is None:
            self._module = dspy.Predict(TranslateText)
        return self._module

    def _translate_sync(self, text: str, source: str, target: str) -> str:
        with dspy.context(lm=self.lm):
            result = self.module(
                text=text,
                source_language=get_language_name(source),
                target_language=get_language_name(target),
            )
        return result.translated_text

    async def translate(self, text: str, source: str, target: str) -> str:
        return await asyncio.to_thread(self._translate_sync, text, source, target)
