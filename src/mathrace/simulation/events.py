"""Race events emitted to presentation and persistence collaborators."""

from dataclasses import dataclass
from enum import Enum

from mathrace.simulation.problem import Problem
from mathrace.simulation.statistics import LapCompletion, RaceResults
from mathrace.speech import InputSource


class EventType(str, Enum):
    """Types of race events."""

    PROBLEM_STARTED = "problem_started"
    ANSWER_CORRECT = "answer_correct"
    ANSWER_INCORRECT = "answer_incorrect"
    TIMEOUT = "timeout"
    LAP_COMPLETED = "lap_completed"
    RACE_FINISHED = "race_finished"
    INPUT_FALLBACK = "input_fallback"


@dataclass
class RaceEvent:
    """Represents a race event.

    Only the fields relevant to ``event_type`` are set: ``boost`` on answers
    and timeouts, ``lap`` on lap completion, ``results`` on race finish.
    """

    event_type: EventType
    time: float
    problem: Problem | None = None
    answer: int | None = None
    source: InputSource | None = None
    boost: float = 0.0
    lap: LapCompletion | None = None
    results: RaceResults | None = None
    description: str = ""
