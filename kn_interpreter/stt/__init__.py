# kn_interpreter/stt/__init__.py
# ===============================
# Speech-to-Text Layer — Kannada Interpreter
#
#   - base.py         Recognizer contract + recognition event types
#   - accumulator.py  Transcript buffer, sentence counting, stop signal
#
# The recognizer itself is a platform collaborator (see api/bridge.py for
# the browser-backed implementation).

from kn_interpreter.stt.base import (  # noqa: F401
    RecognitionEvent,
    RecognitionResult,
    Recognizer,
)
from kn_interpreter.stt.accumulator import (  # noqa: F401
    Accumulation,
    TranscriptAccumulator,
    merge_results,
    sentence_count,
)

__all__ = [
    "RecognitionEvent",
    "RecognitionResult",
    "Recognizer",
    "Accumulation",
    "TranscriptAccumulator",
    "merge_results",
    "sentence_count",
]
