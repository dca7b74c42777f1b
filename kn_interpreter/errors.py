"""
kn_interpreter/errors.py
=========================
Error taxonomy — Kannada Interpreter

Components raise these; the Capture Session Controller and the HTTP
endpoints are the only places that catch them and turn them into a
human-readable status string or an HTTP status code.
"""


class InterpreterError(Exception):
    """Base class for every failure raised by the interpreter core."""
    pass


class UnsupportedCapability(InterpreterError):
    """Raised when the platform lacks speech recognition or synthesis."""

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"{capability} is not supported on this platform")


class PermissionDenied(InterpreterError):
    """Raised when the recognizer refuses to start (e.g. microphone blocked)."""
    pass


class RecognitionError(InterpreterError):
    """Raised for an error reported by a running recognizer."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Speech recognition error: {code}")


class ProviderError(InterpreterError):
    """Raised by a single translation provider on any failure."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} failed: {reason}")


class TranslationUnavailable(InterpreterError):
    """Raised when every provider in the cascade has failed."""
    pass


class SpeechUnavailable(InterpreterError):
    """Raised when no speech synthesizer is usable."""
    pass


class SpeechError(InterpreterError):
    """Raised when an utterance fails or is interrupted."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Speech synthesis failed: {reason}")


class BridgeCommandError(InterpreterError):
    """Raised when the browser rejects, times out on, or drops a command."""

    def __init__(self, command: str, reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Browser command '{command}' failed: {reason}")
