"""
kn_interpreter/translation/cascade.py
======================================
Translation Cascade — Kannada Interpreter

Responsibility:
    - Call the primary provider
    - On ANY primary failure, log a warning and call the secondary provider
      with the identical request
    - Raise ``TranslationUnavailable`` only when the secondary fails too

Rules:
    - Exactly one fallback hop, never more than two attempts
    - Provider calls are strictly sequential; the secondary is only tried
      after the primary has definitively failed
    - Callers never learn which provider failed or why
"""

import logging
from typing import Optional

import aiohttp

from kn_interpreter.errors import ProviderError, TranslationUnavailable
from kn_interpreter.translation.base import TranslationProvider, TranslationRequest
from kn_interpreter.translation.providers import LibreTranslateProvider, MyMemoryProvider

logger = logging.getLogger("kn_interpreter.translation.cascade")


class TranslationCascade:
    """Primary → secondary translation fallback chain."""

    def __init__(self, primary: TranslationProvider, secondary: TranslationProvider):
        self.primary = primary
        self.secondary = secondary

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """
        Translate ``text`` from ``source_lang`` to ``target_lang``.

        Raises:
            ValueError: If ``text`` is empty.
            TranslationUnavailable: If both providers fail.
        """
        request = TranslationRequest(text.strip(), source_lang, target_lang)

        try:
            return await self.primary.translate(request)
        except ProviderError as exc:
            logger.warning(
                "%s failed, falling back to %s: %s",
                self.primary.name, self.secondary.name, exc.reason,
            )

        try:
            result = await self.secondary.translate(request)
        except ProviderError as exc:
            logger.error(
                "Translation %s → %s unavailable — %s also failed: %s",
                source_lang, target_lang, self.secondary.name, exc.reason,
            )
            raise TranslationUnavailable(
                f"No translation available for {source_lang} → {target_lang}"
            ) from exc

        logger.info("Translation served by fallback provider %s.", self.secondary.name)
        return result


def build_default_cascade(
    session: Optional[aiohttp.ClientSession] = None,
) -> TranslationCascade:
    """LibreTranslate as primary, MyMemory as secondary, both from config."""
    return TranslationCascade(
        primary=LibreTranslateProvider(session=session),
        secondary=MyMemoryProvider(session=session),
    )
