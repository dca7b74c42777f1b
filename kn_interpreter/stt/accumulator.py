"""
kn_interpreter/stt/accumulator.py
==================================
Transcript Accumulator — Kannada Interpreter

Responsibility:
    - Merge recognizer result batches into one growing transcript
    - Keep the committed (final) text append-only
    - Track the interim tail separately as a preview
    - Count sentence terminators in the committed text and signal when
      the configured sentence limit has been reached

Resume handling:
    A recognizer run reports the full result list on every event, together
    with the index of the first changed result. The accumulator remembers
    how many results of the current run it has already committed, so a
    duplicate or replayed event never commits the same final twice.
    ``begin_run()`` must be called whenever the recognizer (re)starts,
    because a new run numbers its results from zero again.

This module does NOT:
    - Start or stop the recognizer
    - Decide session state transitions (the Controller does)
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from kn_interpreter.config import MAX_SENTENCES, SENTENCE_TERMINATORS
from kn_interpreter.stt.base import RecognitionEvent, RecognitionResult

logger = logging.getLogger("kn_interpreter.stt.accumulator")


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Accumulation:
    """Outcome of accumulating one recognition event."""

    committed: str
    interim: str
    sentence_count: int
    should_stop: bool

    @property
    def preview(self) -> str:
        """Committed text followed by the in-progress interim tail."""
        return _join(self.committed, self.interim)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def _join(*parts: str) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def sentence_count(text: str, terminators: str = SENTENCE_TERMINATORS) -> int:
    """
    Count sentence-terminating characters in ``text``.

    Every occurrence counts, so an ellipsis typed as "..." counts three
    times while the single character "…" counts once.
    """
    if not text:
        return 0
    return sum(1 for ch in text if ch in terminators)


def merge_results(
    committed: str,
    results: Iterable[RecognitionResult],
) -> tuple[str, str]:
    """
    Merge a batch of new results into the committed text.

    Final fragments are appended in order, separated by single spaces.
    Interim fragments are joined the same way and returned separately;
    they never touch the committed text.

    Returns:
        (updated_committed, interim)
    """
    finals: list[str] = []
    interims: list[str] = []
    for result in results:
        if result.is_final:
            finals.append(result.transcript)
        else:
            interims.append(result.transcript)
    return _join(committed, *finals), _join(*interims)


# ---------------------------------------------------------------------------
# Stateful accumulator
# ---------------------------------------------------------------------------


class TranscriptAccumulator:
    """Append-only transcript buffer with a sentence-limit stop signal."""

    def __init__(
        self,
        limit: int = MAX_SENTENCES,
        terminators: str = SENTENCE_TERMINATORS,
    ):
        if limit < 1:
            raise ValueError(f"Sentence limit must be at least 1, got {limit}")
        if not terminators:
            raise ValueError("At least one sentence terminator is required")
        self.limit = limit
        self.terminators = terminators
        self._committed = ""
        self._interim = ""
        self._cursor = 0

    @property
    def committed(self) -> str:
        return self._committed

    @property
    def interim(self) -> str:
        return self._interim

    @property
    def preview(self) -> str:
        return _join(self._committed, self._interim)

    @property
    def sentence_count(self) -> int:
        return sentence_count(self._committed, self.terminators)

    def reset(self) -> None:
        """Discard all text (new session)."""
        self._committed = ""
        self._interim = ""
        self._cursor = 0

    def begin_run(self) -> None:
        """Prepare for a fresh recognizer run; committed text is kept."""
        self._cursor = 0
        self._interim = ""

    def accumulate(self, event: RecognitionEvent) -> Accumulation:
        """Apply one recognition event and report whether to stop."""
        start = max(event.result_index, 0)
        fresh: list[RecognitionResult] = []

        for index in range(start, len(event.results)):
            if index < self._cursor:
                # Already committed during this run
                continue
            result = event.results[index]
            fresh.append(result)
            if result.is_final:
                self._cursor = index + 1

        skipped = len(event.results) - start - len(fresh)
        if skipped > 0:
            logger.debug(
                "Skipped %d already-committed result(s) (resume index %d, cursor %d).",
                skipped, event.result_index, self._cursor,
            )

        self._committed, self._interim = merge_results(self._committed, fresh)
        count = sentence_count(self._committed, self.terminators)

        return Accumulation(
            committed=self._committed,
            interim=self._interim,
            sentence_count=count,
            should_stop=count >= self.limit,
        )
