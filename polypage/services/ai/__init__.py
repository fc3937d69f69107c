"""
AI services using DSPy.

The only AI behaviour in the pipeline is text translation; the LM is
chosen by Settings.llm_provider.
"""

from polypage.services.ai.client import get_lm
from polypage.services.ai.translation import DspyTranslationBackend, TranslateText

__all__ = [
    "get_lm",
    "DspyTranslationBackend",
    "TranslateText",
]
