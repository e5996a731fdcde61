"""Lap timing, answer accuracy and final race results."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

NO_TIME = "--:--"


def format_time(ms: float) -> str:
    """Format a duration in milliseconds.

    Under a minute the format is ``S.mmms`` (``0.432s``), otherwise
    ``M:SS.mmm`` (``1:05.432``). Infinity (no lap yet) or NaN gives ``--:--``.
    """
    if not math.isfinite(ms):
        return NO_TIME

    total_seconds = int(ms // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    millis = int(ms % 1000)

    if minutes == 0:
        return f"{seconds}.{millis:03d}s"
    return f"{minutes}:{seconds:02d}.{millis:03d}"


@dataclass
class LapCompletion:
    """Emitted each time the car crosses the start/finish line."""

    lap_number: int
    lap_time: float
    is_final_lap: bool


@dataclass
class RaceResults:
    """Final statistics handed to display and leaderboard collaborators."""

    total_time: float
    best_lap_time: float
    lap_times: list[float] = field(default_factory=list)
    correct_answers: int = 0
    total_answers: int = 0
    accuracy: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Plain-value representation, with formatted times for display."""
        return {
            "total_time": self.total_time,
            "total_time_formatted": format_time(self.total_time),
            "best_lap_time": self.best_lap_time,
            "best_lap_time_formatted": format_time(self.best_lap_time),
            "lap_times": list(self.lap_times),
            "lap_times_formatted": [format_time(t) for t in self.lap_times],
            "correct_answers": self.correct_answers,
            "total_answers": self.total_answers,
            "accuracy": self.accuracy,
        }


class StatisticsTracker:
    """Tracks lap progress and answer accuracy for one race.

    Time is the only ranking metric; there is no point scoring. All
    timestamps are race-clock milliseconds.
    """

    def __init__(self, total_laps: int = 3):
        if total_laps < 1:
            raise ValueError("total_laps must be at least 1")
        self.total_laps = total_laps

        self.current_lap = 1
        self.lap_start_time = 0.0
        self.lap_times: list[float] = []
        self.best_lap_time = math.inf

        self.correct_answers = 0
        self.total_answers = 0

        self.race_start_time = 0.0
        self.total_time = 0.0
        self.is_race_complete = False

    def start_race(self, timestamp: float) -> None:
        self.race_start_time = timestamp
        self.lap_start_time = timestamp
        logger.info("Race started at %.1f ms (%d laps)", timestamp, self.total_laps)

    def record_correct_answer(self) -> None:
        self.correct_answers += 1
        self.total_answers += 1

    def record_incorrect_answer(self) -> None:
        self.total_answers += 1

    @property
    def accuracy(self) -> int:
        """Correct answers as a whole percentage, rounded half up."""
        if self.total_answers == 0:
            return 0
        return math.floor(self.correct_answers / self.total_answers * 100 + 0.5)

    def complete_lap(self, timestamp: float) -> LapCompletion:
        """Record a lap and either advance to the next one or finish the race.

        Args:
            timestamp: Race time of the line crossing

        Returns:
            LapCompletion describing the lap just finished
        """
        if self.is_race_complete:
            raise RuntimeError("Race already complete")

        lap_time = timestamp - self.lap_start_time
        self.lap_times.append(lap_time)
        self.best_lap_time = min(self.best_lap_time, lap_time)

        completed_lap = self.current_lap
        is_final_lap = completed_lap >= self.total_laps
        logger.info("Lap %d completed: %s", completed_lap, format_time(lap_time))

        if is_final_lap:
            self.is_race_complete = True
            self.total_time = timestamp - self.race_start_time
            logger.info("Race complete, total time %s", format_time(self.total_time))
        else:
            self.current_lap += 1
            self.lap_start_time = timestamp

        return LapCompletion(lap_number=completed_lap, lap_time=lap_time, is_final_lap=is_final_lap)

    def current_lap_time(self, timestamp: float) -> float:
        """Time spent on the lap in progress."""
        return timestamp - self.lap_start_time

    @property
    def last_lap_time(self) -> float | None:
        return self.lap_times[-1] if self.lap_times else None

    def results(self) -> RaceResults:
        return RaceResults(
            total_time=self.total_time,
            best_lap_time=self.best_lap_time,
            lap_times=list(self.lap_times),
            correct_answers=self.correct_answers,
            total_answers=self.total_answers,
            accuracy=self.accuracy,
        )
