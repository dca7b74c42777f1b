"""
kn_interpreter/api/connection.py
=================================
One browser connection, one Capture Session Controller.

Responsibility:
    - Wire a BrowserChannel, BrowserRecognizer and BrowserSynthesizer to a
      fresh CaptureSessionController
    - Route every incoming message: command replies and synthesis
      completions are resolved inline; recognizer events and user actions
      run as tasks so a handler waiting on a command reply never blocks
      the receive loop that delivers that reply
    - Push a state snapshot to the browser after every Session change
    - On disconnect: fail pending commands, reset the Controller, cancel
      outstanding tasks
"""

import asyncio
import logging
from typing import Any, Coroutine

from starlette.websockets import WebSocketDisconnect

from kn_interpreter.api.bridge import (
    BrowserChannel,
    BrowserRecognizer,
    BrowserSynthesizer,
    parse_recognition_event,
)
from kn_interpreter.errors import BridgeCommandError
from kn_interpreter.session.controller import CaptureSessionController
from kn_interpreter.session.state import Session
from kn_interpreter.translation.cascade import TranslationCascade
from kn_interpreter.tts.sequencer import PlaybackSequencer

logger = logging.getLogger("kn_interpreter.api.connection")


class InterpreterConnection:
    """Runs one WebSocket session end to end."""

    def __init__(self, websocket: Any, cascade: TranslationCascade):
        self._ws = websocket
        self.channel = BrowserChannel(websocket)
        self.recognizer = BrowserRecognizer(self.channel)
        self.synthesizer = BrowserSynthesizer(self.channel)
        self.controller = CaptureSessionController(
            recognizer=self.recognizer,
            cascade=cascade,
            sequencer=PlaybackSequencer(self.synthesizer),
        )
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        unsubscribe = self.controller.subscribe(self._on_session_change)
        try:
            while True:
                try:
                    message = await self._ws.receive_json()
                except WebSocketDisconnect:
                    logger.info("Browser disconnected.")
                    break
                except ValueError as exc:
                    logger.warning("Dropping undecodable message: %s", exc)
                    continue
                self.dispatch(message)
        finally:
            unsubscribe()
            await self.shutdown()

    def dispatch(self, message: Any) -> None:
        if not isinstance(message, dict):
            logger.warning("Dropping non-object message: %r", message)
            return

        kind = message.get("type")

        if kind == "reply":
            self.channel.resolve(message)
        elif kind == "hello":
            self.recognizer.supported = bool(message.get("stt"))
            self.synthesizer.supported = bool(message.get("tts"))
            logger.info(
                "Browser capabilities — STT: %s, TTS: %s.",
                self.recognizer.supported, self.synthesizer.supported,
            )
            self._spawn(self.send_state())
        elif kind == "voices":
            self.synthesizer.update_voices(message.get("voices"))
            self._spawn(self.send_state())
        elif kind == "recognizer.result":
            try:
                event = parse_recognition_event(message)
            except ValueError as exc:
                logger.warning("Dropping malformed recognizer result: %s", exc)
                return
            self._spawn(self.recognizer.emit_result(event))
        elif kind == "recognizer.error":
            self._spawn(self.recognizer.emit_error(str(message.get("error") or "unknown")))
        elif kind == "recognizer.end":
            self._spawn(self.recognizer.emit_end())
        elif kind == "speech.end":
            self.synthesizer.handle_end(message.get("id"))
        elif kind == "speech.error":
            self.synthesizer.handle_error(message.get("id"), message.get("error"))
        elif kind == "action":
            self._spawn(self.run_action(message))
        else:
            logger.warning("Unknown message type %r ignored.", kind)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def run_action(self, message: dict[str, Any]) -> bool:
        action = message.get("action")
        c = self.controller

        if action == "start":
            ok = await c.start()
        elif action == "stop":
            ok = await c.stop()
        elif action == "reset":
            ok = await c.reset()
        elif action == "translate_to_en":
            ok = await c.translate_to_english()
        elif action == "translate_to_kn":
            reply = message.get("reply")
            ok = await c.translate_to_kannada(str(reply) if reply is not None else None)
        elif action == "speak_again":
            ok = await c.speak_again()
        elif action == "set_reply":
            ok = await c.set_reply(str(message.get("text") or ""))
        else:
            logger.warning("Unknown action %r ignored.", action)
            ok = False

        await self._send({"type": "action.done", "action": action, "ok": ok})
        return ok

    # ------------------------------------------------------------------
    # Outgoing
    # ------------------------------------------------------------------

    async def send_state(self) -> None:
        await self._send({
            "type": "state",
            "session": self.controller.session.snapshot(),
            "capabilities": self.controller.capabilities(),
        })

    async def _send(self, message: dict[str, Any]) -> None:
        try:
            await self.channel.send(message)
        except BridgeCommandError:
            logger.debug("Connection closed — %s not delivered.", message.get("type"))

    def _on_session_change(self, session: Session) -> None:
        if not self.channel.closed:
            self._spawn(self.send_state())

    # ------------------------------------------------------------------
    # Task bookkeeping
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Connection task failed: %s", exc, exc_info=exc)

    async def shutdown(self) -> None:
        self.channel.close()
        self.synthesizer.close()
        await self.controller.reset()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
