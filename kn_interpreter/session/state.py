"""
kn_interpreter/session/state.py
================================
Session state for one Start-to-Stop/Reset unit of work.

Only the Capture Session Controller mutates a ``Session``; everything
else reads it (directly or through ``snapshot()``).
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class SessionState(str, Enum):
    """Controller lifecycle states."""

    IDLE = "idle"
    LISTENING = "listening"
    STOPPED = "stopped"
    LIMITED = "limited"


@dataclass
class Session:
    state: SessionState = SessionState.IDLE
    listening: bool = False
    manual_stop: bool = False
    reached_limit: bool = False

    # Kannada captured so far (committed) and the in-progress tail
    heard_text: str = ""
    interim_text: str = ""

    meaning_en: str = ""
    reply_en: str = ""
    reply_kn: str = ""

    status: str = ""
    error: str = ""
    can_speak_again: bool = False

    # Bumped on Start and Reset; late async results carry the old value
    generation: int = 0

    @property
    def preview(self) -> str:
        """Committed text followed by the interim tail."""
        return " ".join(p for p in (self.heard_text, self.interim_text) if p)

    def clear_texts(self) -> None:
        self.heard_text = ""
        self.interim_text = ""
        self.meaning_en = ""
        self.reply_en = ""
        self.reply_kn = ""
        self.can_speak_again = False

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict view for the UI layer."""
        data = asdict(self)
        data["state"] = self.state.value
        data["preview"] = self.preview
        return data
