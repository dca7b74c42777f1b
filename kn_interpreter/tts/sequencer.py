"""
kn_interpreter/tts/sequencer.py
================================
Playback Sequencer — Kannada Interpreter

Responsibility:
    - Choose a voice for the spoken reply language
    - Speak a string, at most one utterance audible at a time
    - Expose completion as a single awaitable that settles exactly once:
      success when the utterance ends, ``SpeechError`` when synthesis
      fails or a newer utterance interrupts it

This module does NOT:
    - Retry failed utterances
    - Translate text
"""

import asyncio
import logging
from typing import Optional

from kn_interpreter.config import RECOGNITION_LOCALE, VOICE_FALLBACK_LOCALE
from kn_interpreter.errors import SpeechError, SpeechUnavailable
from kn_interpreter.tts.base import Synthesizer, Utterance
from kn_interpreter.tts.voices import select_voice

logger = logging.getLogger("kn_interpreter.tts.sequencer")


class PlaybackSequencer:
    """Serializes speech requests onto one synthesizer."""

    def __init__(
        self,
        synthesizer: Optional[Synthesizer],
        locale: str = RECOGNITION_LOCALE,
        fallback_locale: str = VOICE_FALLBACK_LOCALE,
    ):
        self.synthesizer = synthesizer
        self.locale = locale
        self.fallback_locale = fallback_locale
        self._current: Optional[asyncio.Future] = None

    @property
    def available(self) -> bool:
        return self.synthesizer is not None and self.synthesizer.available

    @property
    def speaking(self) -> bool:
        return self._current is not None and not self._current.done()

    async def speak(self, text: str) -> None:
        """
        Speak ``text`` and wait until it finishes.

        Raises:
            SpeechUnavailable: No usable synthesizer.
            SpeechError: Synthesis failed or was interrupted.
        """
        if not self.available:
            raise SpeechUnavailable("Speech synthesis is not supported")

        voice = select_voice(
            self.synthesizer.voices(), self.locale, self.fallback_locale
        )
        loop = asyncio.get_running_loop()
        done: asyncio.Future = loop.create_future()

        def _on_end() -> None:
            if not done.done():
                done.set_result(None)

        def _on_error(reason: str) -> None:
            if not done.done():
                done.set_exception(SpeechError(reason or "unknown"))

        utterance = Utterance(
            text=text,
            lang=voice.lang if voice is not None else self.locale,
            voice=voice,
            on_end=_on_end,
            on_error=_on_error,
        )

        self._interrupt_current()
        self._current = done

        try:
            try:
                await self.synthesizer.cancel()
                # A newer speak() or cancel() may have taken over meanwhile
                if self._current is done:
                    logger.info(
                        "Speaking %d chars with voice %s (%s).",
                        len(text), voice.name if voice else "<platform default>",
                        utterance.lang,
                    )
                    await self.synthesizer.speak(utterance)
            except Exception as exc:
                _on_error(str(exc) or type(exc).__name__)

            await done
        finally:
            if self._current is done:
                self._current = None

    async def cancel(self) -> None:
        """Silence any playback in progress."""
        self._interrupt_current()
        if self.synthesizer is not None:
            await self.synthesizer.cancel()

    def _interrupt_current(self) -> None:
        previous = self._current
        if previous is not None and not previous.done():
            logger.debug("Interrupting the utterance in progress.")
            previous.set_exception(SpeechError("interrupted"))
        self._current = None
