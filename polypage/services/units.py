"""
Per-unit translation.

Maps one source content unit to its replacement in the destination page,
or to None when the unit should not be appended at all.
"""

from __future__ import annotations

import logging

from polypage.core.errors import FetchError
from polypage.core.models import ContentUnit, ImageUnit, TextUnit
from polypage.i18n.translator import ContentTranslator
from polypage.services.images import ImageRelocator

logger = logging.getLogger(__name__)


class ContentUnitTranslator:
    """
    Translates text units and relocates image units.

    Dropped (None):
    - images with no source URL, or whose download failed
    - text units whose translation is empty; an empty block is never appended
    """

    def __init__(self, translator: ContentTranslator, relocator: ImageRelocator):
        self.translator = translator
        self.relocator = relocator

    async def translate_unit(self, unit: ContentUnit, target: str) -> ContentUnit | None:
        if isinstance(unit, ImageUnit):
            return await self._relocate_image(unit)
        return await self._translate_text(unit, target)

    async def _relocate_image(self, unit: ImageUnit) -> ImageUnit | None:
        source_url = unit.source_url
        if not source_url:
            logger.warning("Skipping image block with no retrievable URL")
            return None
        try:
            url = await self.relocator.relocate(source_url)
        except FetchError as e:
            logger.warning(f"Dropping image block: {e}")
            return None
        return ImageUnit(external_url=url)

    async def _translate_text(self, unit: TextUnit, target: str) -> TextUnit | None:
        translated = await self.translator.translate(unit.text, target)
        if not translated:
            return None
        return TextUnit(kind=unit.kind, runs=[translated])
