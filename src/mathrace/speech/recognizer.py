"""Spoken answer recognition: cooldowns, duplicate suppression and engine restarts."""

import logging
import math
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from mathrace.scheduler import ScheduledCall, Scheduler

from .parser import parse_number
from .vocabulary import FRENCH_VOCABULARY, NumberVocabulary

logger = logging.getLogger(__name__)

DUPLICATE_WINDOW_MS = 2000.0
RESTART_DELAY_MS = 1000.0
MAX_START_FAILURES = 3


class InputSource(str, Enum):
    """Channel an answer arrived on."""

    SPEECH = "speech"
    KEYBOARD = "keyboard"


class RecognitionErrorKind(str, Enum):
    """Error codes reported by speech engines (Web Speech API names)."""

    NO_SPEECH = "no-speech"
    AUDIO_CAPTURE = "audio-capture"
    NETWORK = "network"
    ABORTED = "aborted"
    NOT_ALLOWED = "not-allowed"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    UNSUPPORTED = "unsupported"


TRANSIENT_ERRORS = frozenset({
    RecognitionErrorKind.NO_SPEECH,
    RecognitionErrorKind.AUDIO_CAPTURE,
    RecognitionErrorKind.NETWORK,
    RecognitionErrorKind.ABORTED,
})


class RecognizerStatus(str, Enum):
    """Capability/lifecycle status of the spoken channel."""

    IDLE = "idle"
    LISTENING = "listening"
    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    FAILED = "failed"


FATAL_STATUSES = frozenset({
    RecognizerStatus.UNSUPPORTED,
    RecognizerStatus.PERMISSION_DENIED,
    RecognizerStatus.FAILED,
})


class SpeechEngineError(Exception):
    """Raised by an engine that cannot start listening right now."""


class SpeechEngine(Protocol):
    """Continuous listening service producing transcripts.

    The engine reports back through ``AnswerRecognizer.handle_result``,
    ``handle_error`` and ``handle_end``, using race-clock timestamps.
    """

    supported: bool

    def start(self) -> None: ...

    def stop(self) -> None: ...


class NullSpeechEngine:
    """Engine for platforms without speech support (keyboard-only play)."""

    supported = False

    def start(self) -> None:
        raise SpeechEngineError("speech recognition not supported")

    def stop(self) -> None:
        pass


@dataclass(frozen=True)
class TranscriptEvent:
    """One raw engine result; interim results may still change."""

    text: str
    is_final: bool
    timestamp: float


@dataclass(frozen=True)
class AnswerCandidate:
    """A validated number waiting for the race loop."""

    value: int
    source: InputSource
    timestamp: float


@dataclass
class RecognitionState:
    """Bookkeeping that deliberately survives problem changes.

    Only ``ignore_until`` moves when a new problem starts. Keeping the last
    number lets a late duplicate of the previous answer be suppressed
    instead of being scored against the new problem.
    """

    last_number: int | None = None
    last_recognition_time: float = -math.inf
    ignore_until: float = -math.inf


class AnswerRecognizer:
    """Turns a continuous transcript stream into answer candidates.

    Interim and final results go through the same parser so the fastest
    signal drives the car; the duplicate window stops the final result of
    the same utterance from scoring twice. Candidates are only queued here
    and the race loop drains them at its next tick.
    """

    def __init__(
        self,
        engine: SpeechEngine | None = None,
        vocabulary: NumberVocabulary = FRENCH_VOCABULARY,
        scheduler: Scheduler | None = None,
        queue_size: int = 8,
    ):
        """Initialize the recognizer.

        Args:
            engine: Listening service (None = unsupported platform)
            vocabulary: Language word table for parsing
            scheduler: Race-clock scheduler used for restarts
            queue_size: Maximum candidates buffered between ticks
        """
        self.engine = engine if engine is not None else NullSpeechEngine()
        self.vocabulary = vocabulary
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.state = RecognitionState()
        self.is_listening = False
        self.status = RecognizerStatus.IDLE
        self._queue: deque[AnswerCandidate] = deque(maxlen=queue_size)
        self._pending_restart: ScheduledCall | None = None
        self._start_failures = 0

    @property
    def supported(self) -> bool:
        return bool(self.engine.supported)

    @property
    def fallback_required(self) -> bool:
        """True once the spoken channel is unusable and keyboard input must be used."""
        return self.status in FATAL_STATUSES

    def start(self, now: float = 0.0) -> bool:
        """Start listening.

        An engine that refuses to start is retried every
        ``RESTART_DELAY_MS``; after ``MAX_START_FAILURES`` consecutive
        failures the recognizer gives up with status ``FAILED``.

        Args:
            now: Race time of the request (ms), used to schedule retries

        Returns:
            True when the engine is listening
        """
        if not self.supported:
            if self.status is not RecognizerStatus.UNSUPPORTED:
                logger.warning("Speech recognition not supported, keyboard input only")
            self.status = RecognizerStatus.UNSUPPORTED
            return False
        if self.fallback_required:
            return False
        if self.is_listening:
            return True

        self.is_listening = True
        self.status = RecognizerStatus.LISTENING
        self._start_failures = 0
        if not self._start_engine(now):
            return False
        logger.info("Speech recognition started (%s)", self.vocabulary.language)
        return True

    def stop(self) -> None:
        """Stop listening and drop any pending restart."""
        self._cancel_restart()
        if not self.is_listening:
            return
        self.is_listening = False
        if self.status is RecognizerStatus.LISTENING:
            self.status = RecognizerStatus.IDLE
        self.engine.stop()
        logger.info("Speech recognition stopped")

    def reset(self, now: float, cooldown_ms: float = 0.0) -> None:
        """Prepare for a new problem.

        Only the cooldown deadline advances; duplicate tracking is kept.
        """
        self._extend_ignore(now + cooldown_ms)

    def set_cooldown(self, now: float, duration_ms: float) -> None:
        """Ignore results for ``duration_ms`` (trailing audio after an accepted answer)."""
        self._extend_ignore(now + duration_ms)

    def handle_result(self, event: TranscriptEvent) -> int | None:
        """Process one engine result.

        Args:
            event: Interim or final transcript

        Returns:
            The number queued for the race loop, or None when the result was
            ignored (cooldown, duplicate, or no number in it)
        """
        if not self.is_listening:
            return None
        if event.timestamp < self.state.ignore_until:
            logger.debug("Dropped %r during cooldown", event.text)
            return None

        number = parse_number(event.text, self.vocabulary)
        if number is None:
            return None

        elapsed = event.timestamp - self.state.last_recognition_time
        if number == self.state.last_number and elapsed <= DUPLICATE_WINDOW_MS:
            logger.debug("Suppressed duplicate %d (%.0f ms after previous)", number, elapsed)
            return None

        self.state.last_number = number
        self.state.last_recognition_time = event.timestamp
        self.enqueue(AnswerCandidate(value=number, source=InputSource.SPEECH, timestamp=event.timestamp))
        logger.debug(
            "Recognized %d from %s result %r", number, "final" if event.is_final else "interim", event.text
        )
        return number

    def handle_error(self, kind: RecognitionErrorKind | str, now: float) -> None:
        """Process an engine error.

        Transient errors restart the engine after a fixed delay; permission
        or support failures disable the spoken channel for good.
        """
        try:
            kind = RecognitionErrorKind(kind)
        except ValueError:
            logger.warning("Unknown speech recognition error %r", kind)
            return

        if kind in TRANSIENT_ERRORS:
            logger.debug("Transient speech error %s, restarting in %.0f ms", kind.value, RESTART_DELAY_MS)
            self._schedule_restart(now + RESTART_DELAY_MS)
            return

        if kind is RecognitionErrorKind.UNSUPPORTED:
            self._give_up(RecognizerStatus.UNSUPPORTED, kind.value)
        else:
            self._give_up(RecognizerStatus.PERMISSION_DENIED, kind.value)

    def handle_end(self, now: float) -> None:
        """The engine ended its session on its own; resume if still wanted."""
        if self.is_listening and self._pending_restart is None:
            self._schedule_restart(now)

    def enqueue(self, candidate: AnswerCandidate) -> None:
        if len(self._queue) == self._queue.maxlen:
            logger.debug("Answer queue full, dropping oldest candidate")
        self._queue.append(candidate)

    def drain(self) -> list[AnswerCandidate]:
        """Remove and return every queued candidate, oldest first."""
        candidates = []
        while self._queue:
            candidates.append(self._queue.popleft())
        return candidates

    def _extend_ignore(self, deadline: float) -> None:
        self.state.ignore_until = max(self.state.ignore_until, deadline)

    def _schedule_restart(self, due: float) -> None:
        if not self.is_listening:
            return
        self._cancel_restart()
        self._pending_restart = self.scheduler.schedule(due, self._restart, label="speech restart")

    def _cancel_restart(self) -> None:
        if self._pending_restart is not None:
            self._pending_restart.cancel()
            self._pending_restart = None

    def _restart(self) -> None:
        due = self._pending_restart.due if self._pending_restart is not None else 0.0
        self._pending_restart = None
        if not self.is_listening:
            return
        self._start_engine(due)

    def _start_engine(self, now: float) -> bool:
        try:
            self.engine.start()
        except SpeechEngineError as exc:
            self._start_failures += 1
            if self._start_failures >= MAX_START_FAILURES:
                self._give_up(RecognizerStatus.FAILED, str(exc))
                return False
            logger.warning("Speech engine failed to start (%s), retrying in %.0f ms", exc, RESTART_DELAY_MS)
            self._schedule_restart(now + RESTART_DELAY_MS)
            return False
        self._start_failures = 0
        return True

    def _give_up(self, status: RecognizerStatus, reason: str) -> None:
        self._cancel_restart()
        self.is_listening = False
        self.status = status
        logger.error("Speech recognition unavailable (%s), falling back to keyboard", reason)
