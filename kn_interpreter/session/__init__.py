# kn_interpreter/session/__init__.py
# ===================================
# Capture Session Layer — Kannada Interpreter
#
#   - state.py       Session data + SessionState enum
#   - controller.py  Capture Session Controller (recognizer lifecycle,
#                    auto-restart, auto-stop, translate, speak)

from kn_interpreter.session.state import Session, SessionState  # noqa: F401
from kn_interpreter.session.controller import CaptureSessionController  # noqa: F401

__all__ = [
    "Session",
    "SessionState",
    "CaptureSessionController",
]
