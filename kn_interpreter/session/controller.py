"""
kn_interpreter/session/controller.py
=====================================
Capture Session Controller — Kannada Interpreter

Responsibility:
    - Own the recognizer lifecycle: start, stop, auto-restart after a
      spontaneous end, auto-stop once the sentence limit is reached
    - Feed every recognition event to the Transcript Accumulator
    - Run the user-initiated translate actions through the Translation
      Cascade and speak the Kannada reply through the Playback Sequencer
    - Convert every failure into one human-readable ``session.error``

State machine:
    Idle → Listening → (Stopped | Limited) → Idle
    Start is valid from Idle, Stopped and Limited; Reset from anywhere.

Ordering:
    Start, Stop, Reset and the recognizer event handlers are serialized by
    one lock. Translation and playback run outside it, so Stop and Reset
    are never held up by a network call. Every Start and Reset bumps
    ``session.generation``; an async result that comes back under an
    older generation is discarded instead of repopulating cleared fields.
"""

import asyncio
import logging
from typing import Callable, Optional

from kn_interpreter.config import (
    MAX_SENTENCES,
    REPLY_LANGUAGE,
    SENTENCE_TERMINATORS,
    SOURCE_LANGUAGE,
)
from kn_interpreter.errors import (
    PermissionDenied,
    RecognitionError,
    SpeechError,
    SpeechUnavailable,
    TranslationUnavailable,
    UnsupportedCapability,
)
from kn_interpreter.session.state import Session, SessionState
from kn_interpreter.stt.accumulator import TranscriptAccumulator
from kn_interpreter.stt.base import RecognitionEvent, Recognizer
from kn_interpreter.translation.cascade import TranslationCascade
from kn_interpreter.tts.sequencer import PlaybackSequencer

logger = logging.getLogger("kn_interpreter.session.controller")


# ---------------------------------------------------------------------------
# User-visible strings
# ---------------------------------------------------------------------------

STATUS_LISTENING = "Listening for Kannada…"
STATUS_LIMITED = "Captured {limit} sentences. You can translate now."
STATUS_STOPPED = "Stopped. You can translate now."
STATUS_TRANSLATING_TO_EN = "Translating Kannada → English…"
STATUS_READY_FOR_REPLY = "Ready for your English reply."
STATUS_TRANSLATING_TO_KN = "Translating English → Kannada…"
STATUS_SPEAKING = "Speaking Kannada response…"
STATUS_DONE = "Done."

ERR_STT_UNSUPPORTED = "Speech recognition not supported. Use Chrome."
ERR_MIC = "Could not start mic. Allow mic permission and retry."
ERR_ALREADY_LISTENING = "Already listening."
ERR_NOTHING_HEARD = "No Kannada captured. Try again."
ERR_NO_REPLY = "Type your reply in English first."
ERR_TRANSLATION = "Translation failed. Please retry."
ERR_SPEECH_KEEP_TEXT = "Speech failed. You can still copy the Kannada text."
ERR_SPEECH = "Speech failed."

# Synthesis "errors" that only mean a newer utterance took over
_INTERRUPTION_REASONS = {"interrupted", "canceled", "cancelled"}


SessionListener = Callable[[Session], None]


class CaptureSessionController:
    """Top-level capture-and-respond state machine."""

    def __init__(
        self,
        recognizer: Optional[Recognizer],
        cascade: TranslationCascade,
        sequencer: PlaybackSequencer,
        max_sentences: int = MAX_SENTENCES,
        terminators: str = SENTENCE_TERMINATORS,
        source_lang: str = SOURCE_LANGUAGE,
        reply_lang: str = REPLY_LANGUAGE,
    ):
        self.recognizer = recognizer
        self.cascade = cascade
        self.sequencer = sequencer
        self.source_lang = source_lang
        self.reply_lang = reply_lang

        self.session = Session()
        self.accumulator = TranscriptAccumulator(max_sentences, terminators)
        self._lock = asyncio.Lock()
        self._listeners: list[SessionListener] = []

        if recognizer is not None:
            recognizer.bind(self.handle_result, self.handle_error, self.handle_end)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener(session)`` after every change. Returns an unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.session)
            except Exception:
                logger.exception("Session listener failed.")

    def capabilities(self) -> dict[str, str]:
        stt_ok = self.recognizer is not None and self.recognizer.available
        if not self.sequencer.available:
            tts = "Not supported"
        elif self.sequencer.synthesizer.voices():
            tts = "Available"
        else:
            tts = "No voices found"
        return {
            "stt": "Available" if stt_ok else "Not supported",
            "tts": tts,
        }

    # ------------------------------------------------------------------
    # Recognizer lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Begin a fresh capture session."""
        async with self._lock:
            s = self.session
            s.error = ""

            if s.state is SessionState.LISTENING:
                s.error = ERR_ALREADY_LISTENING
                self._notify()
                return False

            try:
                recognizer = self._require_recognizer()
            except UnsupportedCapability as exc:
                logger.warning("Cannot start capture: %s", exc)
                s.error = ERR_STT_UNSUPPORTED
                self._notify()
                return False

            s.generation += 1
            s.manual_stop = False
            s.reached_limit = False
            s.status = ""
            s.clear_texts()
            self.accumulator.reset()
            self.accumulator.begin_run()

            try:
                await self._start_recognizer(recognizer)
            except PermissionDenied as exc:
                logger.warning("Capture start refused: %s", exc)
                s.state = SessionState.IDLE
                s.listening = False
                s.error = ERR_MIC
                self._notify()
                return False

            s.state = SessionState.LISTENING
            s.listening = True
            s.status = STATUS_LISTENING
            logger.info("Session %d listening (limit %d sentences).",
                        s.generation, self.accumulator.limit)
            self._notify()
            return True

    async def stop(self) -> bool:
        """User-requested stop. Only meaningful while listening."""
        async with self._lock:
            s = self.session
            if s.state is not SessionState.LISTENING:
                logger.debug("Stop ignored in state %s.", s.state.value)
                return False

            s.manual_stop = True
            await self.stop_recognizer()
            s.state = SessionState.STOPPED
            s.listening = False
            s.interim_text = ""
            s.status = STATUS_STOPPED
            logger.info("Session %d stopped by user.", s.generation)
            self._notify()
            return True

    async def reset(self) -> bool:
        """Abandon the session from any state and clear everything."""
        async with self._lock:
            s = self.session
            s.manual_stop = True
            s.generation += 1
            await self.stop_recognizer()
            try:
                await self.sequencer.cancel()
            except Exception as exc:
                logger.warning("Could not cancel playback during reset: %s", exc)

            self.accumulator.reset()
            s.clear_texts()
            s.state = SessionState.IDLE
            s.listening = False
            s.reached_limit = False
            s.status = ""
            s.error = ""
            logger.info("Session reset (generation %d).", s.generation)
            self._notify()
            return True

    async def stop_recognizer(self) -> bool:
        """
        Ask the recognizer to stop.

        Returns:
            True if it was already stopped (the stop call was refused),
            False if a running recognizer was stopped.
        """
        if self.recognizer is None:
            return True
        try:
            await self.recognizer.stop()
        except Exception as exc:
            logger.debug("Recognizer stop refused (already stopped): %s", exc)
            return True
        return False

    def _require_recognizer(self) -> Recognizer:
        if self.recognizer is None or not self.recognizer.available:
            raise UnsupportedCapability("Speech recognition")
        return self.recognizer

    async def _start_recognizer(self, recognizer: Recognizer) -> None:
        try:
            await recognizer.start()
        except Exception as exc:
            raise PermissionDenied(str(exc) or type(exc).__name__) from exc

    # ------------------------------------------------------------------
    # Recognizer events
    # ------------------------------------------------------------------

    async def handle_result(self, event: RecognitionEvent) -> None:
        async with self._lock:
            s = self.session
            if s.state is not SessionState.LISTENING:
                logger.debug("Result ignored in state %s.", s.state.value)
                return

            outcome = self.accumulator.accumulate(event)
            s.heard_text = outcome.committed
            s.interim_text = outcome.interim

            if outcome.should_stop:
                s.reached_limit = True
                await self.stop_recognizer()
                s.state = SessionState.LIMITED
                s.listening = False
                s.interim_text = ""
                s.status = STATUS_LIMITED.format(limit=self.accumulator.limit)
                logger.info(
                    "Session %d reached %d sentence(s) — capture stopped.",
                    s.generation, outcome.sentence_count,
                )
            self._notify()

    async def handle_error(self, code: str) -> None:
        async with self._lock:
            s = self.session
            if s.state is not SessionState.LISTENING:
                logger.debug("Recognizer error '%s' ignored in state %s.", code, s.state.value)
                return

            error = RecognitionError(code)
            logger.warning("Session %d: %s", s.generation, error)
            await self.stop_recognizer()
            s.state = SessionState.STOPPED
            s.listening = False
            s.interim_text = ""
            s.status = ""
            s.error = str(error)
            self._notify()

    async def handle_end(self) -> None:
        async with self._lock:
            s = self.session
            if not (
                s.state is SessionState.LISTENING
                and s.listening
                and not s.manual_stop
                and not s.reached_limit
            ):
                logger.debug("Recognizer ended in state %s — no restart.", s.state.value)
                return

            self.accumulator.begin_run()
            if s.interim_text:
                s.interim_text = ""
                self._notify()
            await self._restart_recognizer()

    async def _restart_recognizer(self) -> bool:
        """Best-effort resume after a spontaneous end; failures are logged only."""
        try:
            await self.recognizer.start()
        except Exception as exc:
            logger.warning("Recognizer auto-restart failed (ignored): %s", exc)
            return False
        logger.debug("Recognizer auto-restarted.")
        return True

    # ------------------------------------------------------------------
    # Translate / speak actions
    # ------------------------------------------------------------------

    async def set_reply(self, text: str) -> bool:
        self.session.reply_en = text or ""
        self._notify()
        return True

    async def translate_to_english(self) -> bool:
        """Translate the captured Kannada into English."""
        s = self.session
        s.error = ""
        text = s.heard_text.strip()
        if not text:
            s.error = ERR_NOTHING_HEARD
            self._notify()
            return False

        generation = s.generation
        s.status = STATUS_TRANSLATING_TO_EN
        self._notify()

        try:
            meaning = await self.cascade.translate(text, self.source_lang, self.reply_lang)
        except TranslationUnavailable:
            if not self._is_stale(generation, "Kannada → English translation"):
                s.status = ""
                s.error = ERR_TRANSLATION
                self._notify()
            return False

        if self._is_stale(generation, "Kannada → English translation"):
            return False

        s.meaning_en = meaning
        s.status = STATUS_READY_FOR_REPLY
        self._notify()
        return True

    async def translate_to_kannada(self, reply: Optional[str] = None) -> bool:
        """Translate the English reply into Kannada, then speak it."""
        s = self.session
        s.error = ""
        if reply is not None:
            s.reply_en = reply
        text = s.reply_en.strip()
        if not text:
            s.error = ERR_NO_REPLY
            self._notify()
            return False

        generation = s.generation
        s.status = STATUS_TRANSLATING_TO_KN
        self._notify()

        try:
            kannada = await self.cascade.translate(text, self.reply_lang, self.source_lang)
        except TranslationUnavailable:
            if not self._is_stale(generation, "English → Kannada translation"):
                s.status = ""
                s.error = ERR_TRANSLATION
                self._notify()
            return False

        if self._is_stale(generation, "English → Kannada translation"):
            return False

        s.reply_kn = kannada
        s.can_speak_again = True
        s.status = STATUS_SPEAKING
        self._notify()

        await self._speak(kannada, generation, ERR_SPEECH_KEEP_TEXT)

        if not self._is_stale(generation, "playback"):
            s.status = STATUS_DONE
            self._notify()
        return True

    async def speak_again(self) -> bool:
        s = self.session
        if not s.reply_kn:
            return False
        s.error = ""
        return await self._speak(s.reply_kn, s.generation, ERR_SPEECH)

    async def _speak(self, text: str, generation: int, failure_message: str) -> bool:
        try:
            await self.sequencer.speak(text)
        except SpeechError as exc:
            if exc.reason in _INTERRUPTION_REASONS:
                logger.debug("Playback interrupted by a newer utterance.")
                return False
            logger.warning("Playback failed: %s", exc)
            if not self._is_stale(generation, "playback"):
                self.session.error = failure_message
                self._notify()
            return False
        except SpeechUnavailable as exc:
            logger.warning("Playback unavailable: %s", exc)
            if not self._is_stale(generation, "playback"):
                self.session.error = failure_message
                self._notify()
            return False
        return True

    def _is_stale(self, generation: int, what: str) -> bool:
        if generation != self.session.generation:
            logger.info(
                "Discarding stale %s result (generation %d, current %d).",
                what, generation, self.session.generation,
            )
            return True
        return False
