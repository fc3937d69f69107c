"""
Shared utility functions for the pipeline.
"""

from __future__ import annotations

import re
import secrets
import unicodedata
from datetime import datetime, timezone


def random_suffix(nbytes: int = 10) -> str:
    """Random hex string, two characters per byte."""
    return secrets.token_hex(nbytes)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def compact_id(identifier: str) -> str:
    """
    Normalize a document identifier for comparison and URLs.

    Notion hands out ids both with and without dashes.
    """
    return identifier.replace("-", "").lower()


def slugify(text: str) -> str:
    """
    Turn a title into a URL slug.

    Accents are folded to ASCII; characters with no ASCII form are dropped,
    so a title in a non-Latin script can produce an empty slug.
    """
    normalized = unicodedata.normalize("NFKD", text)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^A-Za-z0-9]+", "-", ascii_text).strip("-")
    return slug
