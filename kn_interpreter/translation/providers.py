"""
kn_interpreter/translation/providers.py
========================================
HTTP translation providers — LibreTranslate and MyMemory

Responsibility:
    - Send one translation request to a public translation API
    - Accept a response only when it carries a non-empty translated text
      field in the provider's expected shape
    - Convert every failure (non-2xx status, undecodable body, missing
      field, network error) into ``ProviderError``

No retries and no explicit timeout: the aiohttp transport default applies.
Retrying is the cascade's job, and it only ever falls back once.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from kn_interpreter.config import (
    LIBRETRANSLATE_API_KEY,
    LIBRETRANSLATE_URL,
    MYMEMORY_EMAIL,
    MYMEMORY_URL,
)
from kn_interpreter.errors import ProviderError
from kn_interpreter.translation.base import TranslationProvider, TranslationRequest

logger = logging.getLogger("kn_interpreter.translation.providers")


# ---------------------------------------------------------------------------
# Shared HTTP plumbing
# ---------------------------------------------------------------------------


class _HttpProvider(TranslationProvider):
    """
    Base for providers that speak JSON over HTTP.

    An ``aiohttp.ClientSession`` may be injected (shared connection pool,
    or a fake in tests); otherwise a short-lived session is opened per call.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session

    async def translate(self, request: TranslationRequest) -> str:
        if self._session is not None:
            return await self._translate_with(self._session, request)
        async with aiohttp.ClientSession() as session:
            return await self._translate_with(session, request)

    async def _translate_with(
        self,
        session: aiohttp.ClientSession,
        request: TranslationRequest,
    ) -> str:
        try:
            data = await self._fetch(session, request)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ProviderError(self.name, f"network error: {exc}") from exc

        translated = self._extract(data)
        logger.debug(
            "%s translated %d chars (%s → %s).",
            self.name, len(request.text), request.source_lang, request.target_lang,
        )
        return translated

    async def _read_json(self, resp: aiohttp.ClientResponse) -> Any:
        if not 200 <= resp.status < 300:
            raise ProviderError(self.name, f"HTTP {resp.status}")
        try:
            return await resp.json(content_type=None)
        except ValueError as exc:
            raise ProviderError(self.name, "response body is not valid JSON") from exc

    async def _fetch(
        self,
        session: aiohttp.ClientSession,
        request: TranslationRequest,
    ) -> Any:
        raise NotImplementedError

    def _extract(self, data: Any) -> str:
        raise NotImplementedError

    def _require_text(self, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ProviderError(self.name, "missing translated text in response")
        return value


# ---------------------------------------------------------------------------
# LibreTranslate (primary)
# ---------------------------------------------------------------------------


class LibreTranslateProvider(_HttpProvider):
    """
    LibreTranslate ``POST /translate``.

    Request:  {"q", "source", "target", "format": "text", ["api_key"]}
    Response: {"translatedText": str}
    """

    name = "LibreTranslate"

    def __init__(
        self,
        url: str = LIBRETRANSLATE_URL,
        api_key: Optional[str] = LIBRETRANSLATE_API_KEY,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(session)
        self.url = url
        self.api_key = api_key

    async def _fetch(self, session, request):
        payload: dict[str, str] = {
            "q": request.text,
            "source": request.source_lang,
            "target": request.target_lang,
            "format": "text",
        }
        if self.api_key:
            payload["api_key"] = self.api_key

        async with session.post(
            self.url,
            json=payload,
            headers={"Content-Type": "application/json"},
        ) as resp:
            return await self._read_json(resp)

    def _extract(self, data):
        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response shape")
        return self._require_text(data.get("translatedText"))


# ---------------------------------------------------------------------------
# MyMemory (secondary)
# ---------------------------------------------------------------------------


class MyMemoryProvider(_HttpProvider):
    """
    MyMemory ``GET /get?q=...&langpair=src|tgt``.

    Response: {"responseData": {"translatedText": str}, "responseStatus": 200}

    MyMemory reports quota and validation problems with HTTP 200 and a
    non-200 ``responseStatus``; those count as failures too.
    """

    name = "MyMemory"

    def __init__(
        self,
        url: str = MYMEMORY_URL,
        email: Optional[str] = MYMEMORY_EMAIL,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        super().__init__(session)
        self.url = url
        self.email = email

    async def _fetch(self, session, request):
        params = {
            "q": request.text,
            "langpair": f"{request.source_lang}|{request.target_lang}",
        }
        if self.email:
            params["de"] = self.email

        async with session.get(self.url, params=params) as resp:
            return await self._read_json(resp)

    def _extract(self, data):
        if not isinstance(data, dict):
            raise ProviderError(self.name, "unexpected response shape")

        status = data.get("responseStatus")
        if status is not None and str(status) != "200":
            detail = data.get("responseDetails") or "no details"
            raise ProviderError(self.name, f"responseStatus {status}: {detail}")

        response_data = data.get("responseData")
        if not isinstance(response_data, dict):
            raise ProviderError(self.name, "missing responseData in response")
        return self._require_text(response_data.get("translatedText"))
