"""
kn_interpreter/api/bridge.py
=============================
Browser bridge — platform speech over a WebSocket

The speech recognizer and synthesizer live in the user's browser. This
module drives them from the server side:

    server → browser   {"type": "command", "id": 7, "command": "recognizer.start", ...}
    browser → server   {"type": "reply", "id": 7, "ok": true}
                       {"type": "reply", "id": 7, "ok": false, "error": "not-allowed"}

Commands without an ``id`` are notifications and get no reply.

Browser-originated events handled here:
    recognizer.result  {"resultIndex": int, "results": [{"transcript", "isFinal"}]}
    recognizer.error   {"error": str}
    recognizer.end     {}
    voices             {"voices": [{"name", "lang"}]}
    speech.end         {"id": int}
    speech.error       {"id": int, "error": str}
"""

import asyncio
import itertools
import logging
from typing import Any, Optional

from kn_interpreter.config import BRIDGE_COMMAND_TIMEOUT, RECOGNITION_LOCALE
from kn_interpreter.errors import BridgeCommandError
from kn_interpreter.stt.base import RecognitionEvent, RecognitionResult, Recognizer
from kn_interpreter.tts.base import Synthesizer, Utterance, Voice

logger = logging.getLogger("kn_interpreter.api.bridge")


# ---------------------------------------------------------------------------
# Channel
# ---------------------------------------------------------------------------


class BrowserChannel:
    """Request/reply and notification messaging over one WebSocket."""

    def __init__(self, websocket: Any, timeout: float = BRIDGE_COMMAND_TIMEOUT):
        self._ws = websocket
        self._timeout = timeout
        self._ids = itertools.count(1)
        self._pending: dict[int, tuple[str, asyncio.Future]] = {}
        self._send_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise BridgeCommandError(
                str(message.get("command") or message.get("type")), "connection closed"
            )
        async with self._send_lock:
            await self._ws.send_json(message)

    async def command(self, name: str, **payload: Any) -> dict[str, Any]:
        """Send a command and wait for the browser's reply."""
        command_id = next(self._ids)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[command_id] = (name, future)
        try:
            await self.send({"type": "command", "id": command_id, "command": name, **payload})
            return await asyncio.wait_for(future, self._timeout)
        except asyncio.TimeoutError as exc:
            raise BridgeCommandError(name, f"no reply within {self._timeout:.1f}s") from exc
        finally:
            self._pending.pop(command_id, None)

    async def notify(self, name: str, **payload: Any) -> None:
        await self.send({"type": "command", "command": name, **payload})

    def resolve(self, message: dict[str, Any]) -> None:
        """Complete the pending command a ``reply`` message refers to."""
        entry = self._pending.get(message.get("id"))
        if entry is None:
            logger.debug("Reply for unknown command id %r ignored.", message.get("id"))
            return
        name, future = entry
        if future.done():
            return
        if message.get("ok", True):
            future.set_result(message)
        else:
            future.set_exception(
                BridgeCommandError(name, str(message.get("error") or "rejected"))
            )

    def close(self) -> None:
        """Fail every pending command; further sends raise."""
        self._closed = True
        for name, future in list(self._pending.values()):
            if not future.done():
                future.set_exception(BridgeCommandError(name, "connection closed"))
        self._pending.clear()


# ---------------------------------------------------------------------------
# Recognizer
# ---------------------------------------------------------------------------


def parse_recognition_event(message: dict[str, Any]) -> RecognitionEvent:
    """
    Build a RecognitionEvent from a ``recognizer.result`` message.

    Raises:
        ValueError: If the message does not have the expected shape.
    """
    raw_results = message.get("results")
    if not isinstance(raw_results, list):
        raise ValueError("recognizer.result without a results list")

    try:
        result_index = int(message.get("resultIndex", 0))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid resultIndex {message.get('resultIndex')!r}") from exc

    results = []
    for i, item in enumerate(raw_results):
        if not isinstance(item, dict) or not isinstance(item.get("transcript", ""), str):
            raise ValueError(f"malformed result at position {i}")
        results.append(
            RecognitionResult(
                transcript=item.get("transcript", ""),
                is_final=bool(item.get("isFinal", False)),
            )
        )
    return RecognitionEvent(result_index=result_index, results=tuple(results))


class BrowserRecognizer(Recognizer):
    """Continuous, interim-enabled browser SpeechRecognition."""

    def __init__(self, channel: BrowserChannel, locale: str = RECOGNITION_LOCALE):
        super().__init__()
        self.channel = channel
        self.locale = locale
        self.supported = False  # set from the client's hello message

    @property
    def available(self) -> bool:
        return self.supported

    async def start(self) -> None:
        await self.channel.command(
            "recognizer.start",
            lang=self.locale,
            continuous=True,
            interimResults=True,
        )

    async def stop(self) -> None:
        await self.channel.command("recognizer.stop")


# ---------------------------------------------------------------------------
# Synthesizer
# ---------------------------------------------------------------------------


class BrowserSynthesizer(Synthesizer):
    """Browser speechSynthesis; completion arrives as speech.end / speech.error."""

    def __init__(self, channel: BrowserChannel):
        self.channel = channel
        self.supported = False  # set from the client's hello message
        self._voices: list[Voice] = []
        self._ids = itertools.count(1)
        self._utterances: dict[int, Utterance] = {}

    @property
    def available(self) -> bool:
        return self.supported

    def voices(self) -> list[Voice]:
        return list(self._voices)

    def update_voices(self, raw_voices: Any) -> None:
        voices: list[Voice] = []
        for item in raw_voices or []:
            if isinstance(item, dict) and item.get("name"):
                voices.append(Voice(name=str(item["name"]), lang=str(item.get("lang") or "")))
        self._voices = voices
        logger.info("Browser reported %d synthesis voice(s).", len(voices))

    async def cancel(self) -> None:
        self._fail_pending("canceled")
        await self.channel.notify("speech.cancel")

    async def speak(self, utterance: Utterance) -> None:
        utterance_id = next(self._ids)
        self._utterances[utterance_id] = utterance
        await self.channel.notify(
            "speech.speak",
            id=utterance_id,
            text=utterance.text,
            lang=utterance.lang,
            voice=utterance.voice.name if utterance.voice else None,
        )

    def handle_end(self, utterance_id: Any) -> None:
        utterance = self._utterances.pop(utterance_id, None)
        if utterance is not None and utterance.on_end is not None:
            utterance.on_end()

    def handle_error(self, utterance_id: Any, reason: Optional[str]) -> None:
        utterance = self._utterances.pop(utterance_id, None)
        if utterance is not None and utterance.on_error is not None:
            utterance.on_error(reason or "unknown")

    def close(self) -> None:
        self._fail_pending("disconnected")

    def _fail_pending(self, reason: str) -> None:
        pending = list(self._utterances.values())
        self._utterances.clear()
        for utterance in pending:
            if utterance.on_error is not None:
                utterance.on_error(reason)
