"""
Language codes and utilities.

Codes are ISO 639-1, lower-case, as used for destination database keys
and for the `<code>_url` columns of the records table.
"""

from enum import Enum


class Language(str, Enum):
    """Languages the pipeline knows names for."""

    EN = "en"
    FR = "fr"
    ES = "es"
    DE = "de"
    IT = "it"
    PT = "pt"
    NL = "nl"
    PL = "pl"
    SV = "sv"
    DA = "da"
    FI = "fi"
    NO = "no"
    CS = "cs"
    RO = "ro"
    HU = "hu"
    EL = "el"
    TR = "tr"
    RU = "ru"
    UK = "uk"
    JA = "ja"
    KO = "ko"
    ZH = "zh"
    AR = "ar"
    HE = "he"
    HI = "hi"


# Human-readable names, passed to the translation backend
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "pl": "Polish",
    "sv": "Swedish",
    "da": "Danish",
    "fi": "Finnish",
    "no": "Norwegian",
    "cs": "Czech",
    "ro": "Romanian",
    "hu": "Hungarian",
    "el": "Greek",
    "tr": "Turkish",
    "ru": "Russian",
    "uk": "Ukrainian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese (Simplified)",
    "ar": "Arabic",
    "he": "Hebrew",
    "hi": "Hindi",
}


# Names people put in config files instead of codes
_NAME_VARIANTS: dict[str, str] = {
    name.lower(): code for code, name in LANGUAGE_NAMES.items()
}
_NAME_VARIANTS.update({
    "chinese": "zh",
    "farsi": "fa",
    "portugese": "pt",
})


def get_language_name(code: str) -> str:
    """Get human-readable language name."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def normalize_language_code(code: str) -> str:
    """
    Normalize a language code to standard form.

    Accepts codes in any case, region-tagged codes ("fr-CA" → "fr") and
    English language names ("French" → "fr").
    """
    code = code.lower().strip().replace("_", "-")
    if code in _NAME_VARIANTS:
        return _NAME_VARIANTS[code]
    if "-" in code:
        code = code.split("-", 1)[0]
    return code
