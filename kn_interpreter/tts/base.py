"""
kn_interpreter/tts/base.py
===========================
Synthesizer contract.

Mirrors a platform speech engine: a voice catalog, a cancel call that
silences anything speaking or queued, and a speak call whose outcome is
reported later through the utterance's ``on_end`` / ``on_error``
callbacks. ``PlaybackSequencer`` turns those callbacks into an awaitable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class Voice:
    """An installed synthesis voice."""

    name: str
    lang: str  # BCP 47 tag as reported by the platform, e.g. "kn-IN"


@dataclass
class Utterance:
    text: str
    lang: str
    voice: Optional[Voice] = None
    on_end: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[str], None]] = None


class Synthesizer(ABC):
    """Abstract speech synthesis engine."""

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def voices(self) -> list[Voice]:
        """Return the currently installed voices (may be empty)."""
        ...

    @abstractmethod
    async def cancel(self) -> None:
        """Silence the current utterance and drop anything queued."""
        ...

    @abstractmethod
    async def speak(self, utterance: Utterance) -> None:
        """Queue ``utterance``; completion is reported via its callbacks."""
        ...
