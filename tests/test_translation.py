"""
tests/test_translation.py
==========================
Translation Cascade Tests

Test categories:
    1. Request validation
    2. LibreTranslate provider against a fake aiohttp session
    3. MyMemory provider against a fake aiohttp session
    4. Cascade fallback rules (one hop, sequential, opaque failure)

All tests are OFFLINE — HTTP is served by in-memory fakes.
"""

import asyncio
import os
import sys
import unittest

import aiohttp

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kn_interpreter.errors import ProviderError, TranslationUnavailable
from kn_interpreter.translation.base import TranslationProvider, TranslationRequest
from kn_interpreter.translation.cascade import TranslationCascade, build_default_cascade
from kn_interpreter.translation.providers import LibreTranslateProvider, MyMemoryProvider


# ===================================================================
# Fakes
# ===================================================================


class FakeResponse:
    def __init__(self, status=200, payload=None, json_error=None):
        self.status = status
        self._payload = payload
        self._json_error = json_error

    async def json(self, content_type="application/json"):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class _RequestContext:
    def __init__(self, response, error):
        self._response = response
        self._error = error

    async def __aenter__(self):
        if self._error is not None:
            raise self._error
        return self._response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; records every request."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return _RequestContext(self.response, self.error)

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return _RequestContext(self.response, self.error)


class ScriptedProvider(TranslationProvider):
    def __init__(self, name, result=None, reason=None, call_log=None):
        self.name = name
        self.result = result
        self.reason = reason
        self.requests = []
        self.call_log = call_log if call_log is not None else []

    async def translate(self, request):
        self.call_log.append(self.name)
        self.requests.append(request)
        await asyncio.sleep(0)
        if self.reason is not None:
            raise ProviderError(self.name, self.reason)
        return self.result


# ===================================================================
# 1. Request validation
# ===================================================================


class TestTranslationRequest(unittest.TestCase):

    def test_empty_text_rejected(self):
        with self.assertRaises(ValueError):
            TranslationRequest("  ", "en", "kn")

    def test_missing_language_rejected(self):
        with self.assertRaises(ValueError):
            TranslationRequest("hello", "", "kn")

    def test_request_is_immutable(self):
        request = TranslationRequest("hello", "en", "kn")
        with self.assertRaises(Exception):
            request.text = "bye"


# ===================================================================
# 2. LibreTranslate
# ===================================================================


class TestLibreTranslateProvider(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.request = TranslationRequest("hello", "en", "kn")

    async def test_success(self):
        session = FakeSession(FakeResponse(200, {"translatedText": "ನಮಸ್ಕಾರ"}))
        provider = LibreTranslateProvider(url="http://lt.test/translate", api_key=None, session=session)

        result = await provider.translate(self.request)

        self.assertEqual(result, "ನಮಸ್ಕಾರ")
        method, url, kwargs = session.calls[0]
        self.assertEqual(method, "POST")
        self.assertEqual(url, "http://lt.test/translate")
        self.assertEqual(
            kwargs["json"],
            {"q": "hello", "source": "en", "target": "kn", "format": "text"},
        )

    async def test_api_key_sent_when_configured(self):
        session = FakeSession(FakeResponse(200, {"translatedText": "ನಮಸ್ಕಾರ"}))
        provider = LibreTranslateProvider(url="http://lt.test", api_key="secret", session=session)
        await provider.translate(self.request)
        self.assertEqual(session.calls[0][2]["json"]["api_key"], "secret")

    async def test_http_500_is_failure(self):
        session = FakeSession(FakeResponse(500, {"error": "boom"}))
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError) as ctx:
            await provider.translate(self.request)
        self.assertIn("HTTP 500", ctx.exception.reason)

    async def test_missing_field_is_failure(self):
        session = FakeSession(FakeResponse(200, {"detectedLanguage": "en"}))
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)

    async def test_empty_translation_is_failure(self):
        session = FakeSession(FakeResponse(200, {"translatedText": "   "}))
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)

    async def test_non_object_payload_is_failure(self):
        session = FakeSession(FakeResponse(200, ["ನಮಸ್ಕಾರ"]))
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)

    async def test_invalid_json_is_failure(self):
        session = FakeSession(FakeResponse(200, json_error=ValueError("Expecting value")))
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)

    async def test_network_error_is_failure(self):
        session = FakeSession(error=aiohttp.ClientConnectionError("connection refused"))
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError) as ctx:
            await provider.translate(self.request)
        self.assertIn("network error", ctx.exception.reason)

    async def test_timeout_is_failure(self):
        session = FakeSession(error=asyncio.TimeoutError())
        provider = LibreTranslateProvider(url="http://lt.test", api_key=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)


# ===================================================================
# 3. MyMemory
# ===================================================================


class TestMyMemoryProvider(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.request = TranslationRequest("ನಮಸ್ಕಾರ", "kn", "en")

    async def test_success(self):
        payload = {"responseData": {"translatedText": "Hello"}, "responseStatus": 200}
        session = FakeSession(FakeResponse(200, payload))
        provider = MyMemoryProvider(url="http://mm.test/get", email=None, session=session)

        result = await provider.translate(self.request)

        self.assertEqual(result, "Hello")
        method, url, kwargs = session.calls[0]
        self.assertEqual(method, "GET")
        self.assertEqual(kwargs["params"], {"q": "ನಮಸ್ಕಾರ", "langpair": "kn|en"})

    async def test_email_sent_when_configured(self):
        payload = {"responseData": {"translatedText": "Hello"}}
        session = FakeSession(FakeResponse(200, payload))
        provider = MyMemoryProvider(url="http://mm.test/get", email="me@example.com", session=session)
        await provider.translate(self.request)
        self.assertEqual(session.calls[0][2]["params"]["de"], "me@example.com")

    async def test_quota_status_in_body_is_failure(self):
        payload = {
            "responseData": {"translatedText": "MYMEMORY WARNING: YOU USED ALL AVAILABLE FREE TRANSLATIONS"},
            "responseStatus": 429,
            "responseDetails": "quota exceeded",
        }
        session = FakeSession(FakeResponse(200, payload))
        provider = MyMemoryProvider(url="http://mm.test/get", email=None, session=session)
        with self.assertRaises(ProviderError) as ctx:
            await provider.translate(self.request)
        self.assertIn("429", ctx.exception.reason)

    async def test_string_status_200_accepted(self):
        payload = {"responseData": {"translatedText": "Hello"}, "responseStatus": "200"}
        session = FakeSession(FakeResponse(200, payload))
        provider = MyMemoryProvider(url="http://mm.test/get", email=None, session=session)
        self.assertEqual(await provider.translate(self.request), "Hello")

    async def test_missing_response_data_is_failure(self):
        session = FakeSession(FakeResponse(200, {"responseStatus": 200}))
        provider = MyMemoryProvider(url="http://mm.test/get", email=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)

    async def test_http_error_is_failure(self):
        session = FakeSession(FakeResponse(503, None))
        provider = MyMemoryProvider(url="http://mm.test/get", email=None, session=session)
        with self.assertRaises(ProviderError):
            await provider.translate(self.request)


# ===================================================================
# 4. Cascade
# ===================================================================


class TestTranslationCascade(unittest.IsolatedAsyncioTestCase):

    async def test_primary_success_skips_secondary(self):
        primary = ScriptedProvider("primary", result="ನಮಸ್ಕಾರ")
        secondary = ScriptedProvider("secondary", result="unused")
        cascade = TranslationCascade(primary, secondary)

        self.assertEqual(await cascade.translate("hello", "en", "kn"), "ನಮಸ್ಕಾರ")
        self.assertEqual(secondary.requests, [])

    async def test_fallback_returns_secondary_result(self):
        log = []
        primary = ScriptedProvider("primary", reason="HTTP 500", call_log=log)
        secondary = ScriptedProvider("secondary", result="ನಮಸ್ಕಾರ", call_log=log)
        cascade = TranslationCascade(primary, secondary)

        with self.assertLogs("kn_interpreter.translation.cascade", level="WARNING") as logs:
            result = await cascade.translate("hello", "en", "kn")

        self.assertEqual(result, "ನಮಸ್ಕಾರ")
        self.assertEqual(log, ["primary", "secondary"])
        self.assertTrue(any("falling back" in line for line in logs.output))

    async def test_secondary_gets_identical_request(self):
        primary = ScriptedProvider("primary", reason="bad payload")
        secondary = ScriptedProvider("secondary", result="Hello")
        cascade = TranslationCascade(primary, secondary)

        await cascade.translate("  ನಮಸ್ಕಾರ ", "kn", "en")

        self.assertEqual(primary.requests, secondary.requests)
        self.assertEqual(primary.requests[0], TranslationRequest("ನಮಸ್ಕಾರ", "kn", "en"))

    async def test_both_fail_raises_unavailable(self):
        primary = ScriptedProvider("primary", reason="HTTP 500")
        secondary = ScriptedProvider("secondary", reason="network error")
        cascade = TranslationCascade(primary, secondary)

        with self.assertRaises(TranslationUnavailable) as ctx:
            await cascade.translate("hello", "en", "kn")

        self.assertNotIn("primary", str(ctx.exception))
        self.assertNotIn("secondary", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, ProviderError)

    async def test_exactly_two_attempts(self):
        log = []
        cascade = TranslationCascade(
            ScriptedProvider("primary", reason="x", call_log=log),
            ScriptedProvider("secondary", reason="y", call_log=log),
        )
        with self.assertRaises(TranslationUnavailable):
            await cascade.translate("hello", "en", "kn")
        self.assertEqual(log, ["primary", "secondary"])

    async def test_empty_text_rejected_before_any_call(self):
        primary = ScriptedProvider("primary", result="x")
        cascade = TranslationCascade(primary, ScriptedProvider("secondary", result="y"))
        with self.assertRaises(ValueError):
            await cascade.translate("   ", "en", "kn")
        self.assertEqual(primary.requests, [])

    async def test_libretranslate_500_falls_back_to_mymemory(self):
        lt_session = FakeSession(FakeResponse(500, {"error": "Internal Server Error"}))
        mm_session = FakeSession(FakeResponse(200, {
            "responseData": {"translatedText": "ನಮಸ್ಕಾರ"},
            "responseStatus": 200,
        }))
        cascade = TranslationCascade(
            LibreTranslateProvider(url="http://lt.test", api_key=None, session=lt_session),
            MyMemoryProvider(url="http://mm.test", email=None, session=mm_session),
        )

        result = await cascade.translate("hello", "en", "kn")

        self.assertEqual(result, "ನಮಸ್ಕಾರ")
        self.assertEqual(len(lt_session.calls), 1)
        self.assertEqual(mm_session.calls[0][2]["params"]["langpair"], "en|kn")

    def test_default_cascade_order(self):
        cascade = build_default_cascade(session=FakeSession())
        self.assertIsInstance(cascade.primary, LibreTranslateProvider)
        self.assertIsInstance(cascade.secondary, MyMemoryProvider)


if __name__ == "__main__":
    unittest.main()
