"""
kn_interpreter/config.py
=========================
Configuration — Kannada Interpreter

All settings are read once from the environment (after loading ``.env``)
and exposed as module-level constants. Components take these as their
default arguments so tests can pass explicit values instead.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("kn_interpreter.config")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r — using default %d.", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid number for %s=%r — using default %.1f.", name, raw, default)
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes")


# ---------------------------------------------------------------------------
# Languages
# ---------------------------------------------------------------------------

SOURCE_LANGUAGE: str = os.environ.get("SOURCE_LANGUAGE", "kn")
REPLY_LANGUAGE: str = os.environ.get("REPLY_LANGUAGE", "en")

# BCP 47 locale the recognizer listens in and the synthesizer speaks in
RECOGNITION_LOCALE: str = os.environ.get("RECOGNITION_LOCALE", "kn-IN")

# Regional voice used when no Kannada voice is installed
VOICE_FALLBACK_LOCALE: str = os.environ.get("VOICE_FALLBACK_LOCALE", "en-IN")


# ---------------------------------------------------------------------------
# Capture policy
# ---------------------------------------------------------------------------

MAX_SENTENCES: int = _env_int("MAX_SENTENCES", 5)

# "." "!" "?" ellipsis and the danda used as a full stop in Indic scripts
SENTENCE_TERMINATORS: str = os.environ.get("SENTENCE_TERMINATORS", ".!?…।")


# ---------------------------------------------------------------------------
# Translation providers
# ---------------------------------------------------------------------------

LIBRETRANSLATE_URL: str = os.environ.get(
    "LIBRETRANSLATE_URL", "https://libretranslate.com/translate"
)
LIBRETRANSLATE_API_KEY: str | None = os.environ.get("LIBRETRANSLATE_API_KEY") or None

MYMEMORY_URL: str = os.environ.get(
    "MYMEMORY_URL", "https://api.mymemory.translated.net/get"
)
# Registering an email with MyMemory raises its daily quota
MYMEMORY_EMAIL: str | None = os.environ.get("MYMEMORY_EMAIL") or None


# ---------------------------------------------------------------------------
# Server / bridge
# ---------------------------------------------------------------------------

BRIDGE_COMMAND_TIMEOUT: float = _env_float("BRIDGE_COMMAND_TIMEOUT", 10.0)

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
HOST: str = os.environ.get("HOST", "127.0.0.1")
PORT: int = _env_int("PORT", 8000)
RELOAD: bool = _env_bool("RELOAD", False)
