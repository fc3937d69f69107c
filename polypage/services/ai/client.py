"""
LLM client configuration using DSPy.

Supports Gemini (primary), OpenAI, and Anthropic. Keys and model names
come from Settings rather than being read ad hoc from the environment.
"""

from __future__ import annotations

import dspy

from polypage.config import Settings, get_settings


def get_lm(settings: Settings | None = None) -> dspy.LM:
    """
    Build the language model for the configured provider.

    Raises:
        ValueError: unknown provider or missing API key
    """
    settings = settings or get_settings()
    provider = settings.llm_provider

    if provider == "gemini":
        api_key = settings.google_api_key or settings.gemini_api_key
        model = f"gemini/{settings.gemini_model}"
    elif provider == "openai":
        api_key = settings.openai_api_key
        model = f"openai/{settings.openai_model}"
    elif provider == "anthropic":
        api_key = settings.anthropic_api_key
        model = f"anthropic/{settings.anthropic_model}"
    else:
        raise ValueError(f"Unknown provider: {provider}")

    if not api_key:
        raise ValueError(f"No API key configured for provider {provider}")
    return dspy.LM(model=model, api_key=api_key)
