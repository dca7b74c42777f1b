"""
kn_interpreter/tts/voices.py
=============================
Voice selection policy.

Preference order:
    1. A voice whose language tag equals the target locale ("kn-IN")
    2. A voice whose tag starts with the target's two-letter code ("kn")
    3. A voice for the regional fallback locale ("en-IN")
    4. The first installed voice of any language
    5. None — let the platform use its default

Tags are compared case-insensitively and "_" is treated as "-", since
desktop engines often report "kn_IN" where browsers report "kn-IN".
"""

from typing import Optional, Sequence

from kn_interpreter.config import RECOGNITION_LOCALE, VOICE_FALLBACK_LOCALE
from kn_interpreter.tts.base import Voice


def _normalize_tag(tag: str) -> str:
    return (tag or "").strip().lower().replace("_", "-")


def select_voice(
    voices: Sequence[Voice],
    target_locale: str = RECOGNITION_LOCALE,
    fallback_locale: str = VOICE_FALLBACK_LOCALE,
) -> Optional[Voice]:
    """Pick the best voice for ``target_locale`` from ``voices``."""
    if not voices:
        return None

    target = _normalize_tag(target_locale)
    language = target.split("-", 1)[0]
    fallback = _normalize_tag(fallback_locale)

    for voice in voices:
        if _normalize_tag(voice.lang) == target:
            return voice

    for voice in voices:
        tag = _normalize_tag(voice.lang)
        if tag == language or tag.startswith(language + "-"):
            return voice

    if fallback:
        for voice in voices:
            if fallback in _normalize_tag(voice.lang):
                return voice

    return voices[0]
