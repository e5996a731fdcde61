"""Simulation engine components."""

from .events import EventType, RaceEvent
from .problem import Problem, ProblemLifecycle, ProblemTimer
from .race import RaceLoop, RacePhase, TickSnapshot
from .statistics import LapCompletion, RaceResults, StatisticsTracker, format_time

__all__ = [
    "EventType",
    "LapCompletion",
    "Problem",
    "ProblemLifecycle",
    "ProblemTimer",
    "RaceEvent",
    "RaceLoop",
    "RacePhase",
    "RaceResults",
    "StatisticsTracker",
    "TickSnapshot",
    "format_time",
]
