# kn_interpreter/translation/__init__.py
# =======================================
# Translation Layer — Kannada Interpreter
#
#   - base.py       TranslationRequest + provider contract
#   - providers.py  LibreTranslate (primary) and MyMemory (secondary)
#   - cascade.py    Primary → secondary fallback, one hop, no retries
#
# Public API:
#   TranslationCascade.translate(text, source_lang, target_lang) → str

from kn_interpreter.translation.base import (  # noqa: F401
    TranslationProvider,
    TranslationRequest,
)
from kn_interpreter.translation.providers import (  # noqa: F401
    LibreTranslateProvider,
    MyMemoryProvider,
)
from kn_interpreter.translation.cascade import (  # noqa: F401
    TranslationCascade,
    build_default_cascade,
)

__all__ = [
    "TranslationProvider",
    "TranslationRequest",
    "LibreTranslateProvider",
    "MyMemoryProvider",
    "TranslationCascade",
    "build_default_cascade",
]
