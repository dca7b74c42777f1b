# kn_interpreter/tts/__init__.py
# ===============================
# Text-to-Speech Layer — Kannada Interpreter
#
#   - base.py       Synthesizer contract, Voice, Utterance
#   - voices.py     Ranked voice selection from the platform catalog
#   - sequencer.py  One-at-a-time playback with a single-shot completion

from kn_interpreter.tts.base import Synthesizer, Utterance, Voice  # noqa: F401
from kn_interpreter.tts.voices import select_voice  # noqa: F401
from kn_interpreter.tts.sequencer import PlaybackSequencer  # noqa: F401

__all__ = [
    "Synthesizer",
    "Utterance",
    "Voice",
    "select_voice",
    "PlaybackSequencer",
]
