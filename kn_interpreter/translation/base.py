"""
kn_interpreter/translation/base.py
===================================
Translation provider contract.

Every provider takes the same immutable request and either returns a
non-empty translated string or raises ``ProviderError``. Provider-specific
request and response shapes stay inside the provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class TranslationRequest:
    """A single translation request. Immutable once issued."""

    text: str
    source_lang: str
    target_lang: str

    def __post_init__(self) -> None:
        if not self.text or not self.text.strip():
            raise ValueError("Translation text must be non-empty")
        if not self.source_lang or not self.target_lang:
            raise ValueError("Source and target languages are required")


class TranslationProvider(ABC):
    """Abstract network translation provider."""

    name: str = "provider"

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> str:
        """
        Translate ``request.text``.

        Raises:
            ProviderError: On a non-success status, a malformed or empty
                payload, or a network failure.
        """
        ...
