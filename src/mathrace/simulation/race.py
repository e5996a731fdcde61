"""Tick-driven race loop."""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from mathrace.models import RaceConfig, TrackGeometry, TrackPoint, VehicleState
from mathrace.simulation.events import EventType, RaceEvent
from mathrace.simulation.problem import Problem, ProblemLifecycle
from mathrace.simulation.statistics import RaceResults, StatisticsTracker, format_time
from mathrace.speech import AnswerCandidate, AnswerRecognizer, InputSource, KeypadBuffer

logger = logging.getLogger(__name__)


class RacePhase(str, Enum):
    """Race lifecycle."""

    READY = "ready"
    RUNNING = "running"
    FINISHED = "finished"
    STOPPED = "stopped"


@dataclass
class TickSnapshot:
    """Everything the renderer and HUD need after one tick."""

    time: float
    phase: RacePhase
    position: float
    velocity: float
    pose: TrackPoint
    current_lap: int
    current_lap_time: float
    problem: Problem | None
    remaining_fraction: float
    events: list[RaceEvent] = field(default_factory=list)


class RaceLoop:
    """Orchestrates physics, problems, answers and lap statistics.

    A host calls ``tick`` once per frame with the elapsed milliseconds.
    Answers from the recognizer (or the keypad) are queued between ticks and
    applied at the start of the next one, so race state is only ever mutated
    from ``tick``. Delayed transitions run from the scheduler in race time.
    """

    def __init__(
        self,
        config: RaceConfig | None = None,
        track: TrackGeometry | None = None,
        recognizer: AnswerRecognizer | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize the race loop.

        Args:
            config: Race configuration (defaults to the standard 3-lap race)
            track: Track geometry (defaults to the fixed oval)
            recognizer: Spoken answer recognizer; its scheduler becomes the
                race scheduler. Defaults to a keyboard-only recognizer.
            rng: Random number generator for problem generation
        """
        self.config = config if config is not None else RaceConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.track = track if track is not None else TrackGeometry()
        self.recognizer = recognizer if recognizer is not None else AnswerRecognizer()
        self.scheduler = self.recognizer.scheduler

        timing = self.config.timing
        self.vehicle = VehicleState.from_settings(self.config.physics)
        self.problems = ProblemLifecycle(
            self.config.selected_tables,
            duration=timing.problem_duration,
            boost_scale=self.config.boost_scale,
            rng=self.rng,
        )
        self.stats = StatisticsTracker(total_laps=self.config.total_laps)
        self.keypad = KeypadBuffer()

        self.now = 0.0
        self.phase = RacePhase.READY
        self.results: RaceResults | None = None
        self.history: list[RaceEvent] = []
        self._tick_events: list[RaceEvent] = []
        self._awaiting_next_problem = False
        self._fallback_reported = False

    @property
    def is_running(self) -> bool:
        return self.phase is RacePhase.RUNNING

    def start(self, now: float = 0.0) -> TickSnapshot:
        """Start the race clock, the recognizer and the first problem.

        Args:
            now: Race time of the start (ms)

        Returns:
            Snapshot holding the start events
        """
        if self.phase is not RacePhase.READY:
            raise RuntimeError(f"Race cannot start from phase {self.phase.value}")

        self._tick_events = []
        self.now = now
        self.phase = RacePhase.RUNNING
        self.stats.start_race(now)
        self.recognizer.start(now)
        self._check_fallback()
        self._start_new_problem()
        return self._snapshot()

    def tick(self, delta_ms: float) -> TickSnapshot:
        """Advance the race by one frame.

        Args:
            delta_ms: Elapsed time since the previous tick in milliseconds

        Returns:
            Snapshot after the tick, with the events it produced
        """
        if self.phase is RacePhase.READY:
            raise RuntimeError("Race not started")

        self._tick_events = []
        if not self.is_running:
            return self._snapshot()

        if not math.isfinite(delta_ms) or delta_ms < 0:
            delta_ms = 0.0
        self.now += delta_ms
        dt = delta_ms / 1000.0

        self.scheduler.run_due(self.now)
        self._check_fallback()

        for candidate in self.recognizer.drain():
            self._apply_answer(candidate)

        if self.vehicle.update(dt):
            self._complete_lap()
            if not self.is_running:
                return self._snapshot()

        timer_was_active = self.problems.timer.active
        self.problems.update_timer(dt)
        if timer_was_active and self.problems.timed_out:
            self._handle_timeout()

        return self._snapshot()

    def press_key(self, key: str) -> None:
        """Feed one key press to the typed answer buffer."""
        candidate = self.keypad.press(key, self.now)
        if candidate is not None:
            self.recognizer.enqueue(candidate)

    def stop(self) -> None:
        """Tear down a running race, cancelling every pending transition."""
        if not self.is_running:
            return
        self.phase = RacePhase.STOPPED
        self._shutdown()
        logger.info("Race stopped at %s", format_time(self.now - self.stats.race_start_time))

    def _apply_answer(self, candidate: AnswerCandidate) -> None:
        if not self.is_running or self._awaiting_next_problem or self.problems.current is None:
            logger.debug("Ignored answer %d between problems", candidate.value)
            return

        if self.problems.check_answer(candidate.value):
            self._handle_correct(candidate)
        elif candidate.source is InputSource.KEYBOARD or self.config.record_spoken_mismatches:
            # The timer keeps running so the player can retry
            self.stats.record_incorrect_answer()
            self._emit(
                EventType.ANSWER_INCORRECT,
                problem=self.problems.current,
                answer=candidate.value,
                source=candidate.source,
            )
        else:
            logger.debug("Spoken %d does not match, treated as noise", candidate.value)

    def _handle_correct(self, candidate: AnswerCandidate) -> None:
        boost = self.problems.calculate_boost()
        self.problems.stop_timer()
        self.vehicle.apply_boost(boost)
        self.stats.record_correct_answer()

        self._awaiting_next_problem = True
        self.keypad.clear()
        self.recognizer.set_cooldown(self.now, self.config.timing.post_answer_cooldown_ms)

        self._emit(
            EventType.ANSWER_CORRECT,
            problem=self.problems.current,
            answer=candidate.value,
            source=candidate.source,
            boost=boost,
            description=f"Correct! +{boost:.2f} boost",
        )
        self._schedule_next_problem(self.config.timing.correct_answer_delay_ms)

    def _handle_timeout(self) -> None:
        self.stats.record_incorrect_answer()
        self._awaiting_next_problem = True
        self.keypad.clear()
        self._emit(EventType.TIMEOUT, problem=self.problems.current, description="Time up!")
        self._schedule_next_problem(self.config.timing.timeout_delay_ms)

    def _schedule_next_problem(self, delay_ms: float) -> None:
        self.scheduler.schedule(self.now + delay_ms, self._start_new_problem, label="next problem")

    def _start_new_problem(self) -> None:
        problem = self.problems.generate()
        self._awaiting_next_problem = False
        self.keypad.clear()
        self.recognizer.reset(self.now, self.config.timing.new_problem_cooldown_ms)
        self._emit(EventType.PROBLEM_STARTED, problem=problem, description=f"{problem.key} = ?")

        read_delay = self.config.timing.problem_read_delay_ms
        if read_delay <= 0:
            self.problems.start_timer()
            return

        def start_timer() -> None:
            # Skip when the problem was already answered during the read delay
            if self.problems.current is problem and not self._awaiting_next_problem:
                self.problems.start_timer()

        self.scheduler.schedule(self.now + read_delay, start_timer, label="problem timer")

    def _complete_lap(self) -> None:
        completion = self.stats.complete_lap(self.now)
        self._emit(
            EventType.LAP_COMPLETED,
            lap=completion,
            description=f"Lap {completion.lap_number}: {format_time(completion.lap_time)}",
        )
        if completion.is_final_lap:
            self._finish()

    def _finish(self) -> None:
        self.phase = RacePhase.FINISHED
        self._shutdown()
        self.results = self.stats.results()
        self._emit(
            EventType.RACE_FINISHED,
            results=self.results,
            description=f"Finished in {format_time(self.results.total_time)}",
        )

    def _shutdown(self) -> None:
        cancelled = self.scheduler.cancel_all()
        if cancelled:
            logger.debug("Cancelled %d pending transitions", cancelled)
        self.recognizer.stop()
        self.problems.stop_timer()
        self.keypad.clear()

    def _check_fallback(self) -> None:
        if self._fallback_reported or not self.recognizer.fallback_required:
            return
        self._fallback_reported = True
        self._emit(
            EventType.INPUT_FALLBACK,
            description=f"Speech input {self.recognizer.status.value}, keyboard only",
        )

    def _emit(self, event_type: EventType, **fields) -> RaceEvent:
        event = RaceEvent(event_type=event_type, time=self.now, **fields)
        self._tick_events.append(event)
        self.history.append(event)
        logger.debug("%s at %.1f ms %s", event_type.value, self.now, event.description)
        return event

    def _snapshot(self) -> TickSnapshot:
        return TickSnapshot(
            time=self.now,
            phase=self.phase,
            position=self.vehicle.position,
            velocity=self.vehicle.velocity,
            pose=self.track.position_at(self.vehicle.position),
            current_lap=self.stats.current_lap,
            current_lap_time=self.stats.current_lap_time(self.now),
            problem=self.problems.current,
            remaining_fraction=self.problems.remaining_fraction,
            events=list(self._tick_events),
        )
