"""
kn_interpreter/stt/base.py
===========================
Recognizer contract — Kannada Interpreter

A recognizer is a continuous, interim-enabled speech recognizer for a
single locale. It is started and stopped by the Capture Session
Controller and reports back through three bound coroutine handlers:

    on_result(RecognitionEvent)   new or revised results
    on_error(code)                recognizer-side failure
    on_end()                      the recognizer stopped (for any reason)

Implementations must not invoke the handlers from inside ``start()`` or
``stop()``; events are always delivered later on the event loop.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional


@dataclass(frozen=True)
class RecognitionResult:
    """One recognition result: a final fragment or an interim preview."""

    transcript: str
    is_final: bool


@dataclass(frozen=True)
class RecognitionEvent:
    """
    A result batch for the current recognizer run.

    ``results`` holds every result of the run so far; ``result_index`` is
    the position of the first result that changed since the last event.
    """

    result_index: int
    results: tuple[RecognitionResult, ...] = field(default_factory=tuple)


ResultHandler = Callable[[RecognitionEvent], Awaitable[None]]
ErrorHandler = Callable[[str], Awaitable[None]]
EndHandler = Callable[[], Awaitable[None]]


class Recognizer(ABC):
    """Abstract continuous speech recognizer."""

    def __init__(self) -> None:
        self._on_result: Optional[ResultHandler] = None
        self._on_error: Optional[ErrorHandler] = None
        self._on_end: Optional[EndHandler] = None

    @property
    def available(self) -> bool:
        """Whether the platform offers speech recognition at all."""
        return True

    def bind(
        self,
        on_result: ResultHandler,
        on_error: ErrorHandler,
        on_end: EndHandler,
    ) -> None:
        self._on_result = on_result
        self._on_error = on_error
        self._on_end = on_end

    @abstractmethod
    async def start(self) -> None:
        """Begin capturing. Raises if the platform refuses to start."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop capturing. May raise if the recognizer is not running."""
        ...

    async def emit_result(self, event: RecognitionEvent) -> None:
        if self._on_result is not None:
            await self._on_result(event)

    async def emit_error(self, code: str) -> None:
        if self._on_error is not None:
            await self._on_error(code)

    async def emit_end(self) -> None:
        if self._on_end is not None:
            await self._on_end()
