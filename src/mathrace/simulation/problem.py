"""Multiplication problem generation, countdown timer and boost strength."""

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

SECOND_FACTOR_RANGE = (2, 10)
MAX_GENERATION_ATTEMPTS = 100


@dataclass(frozen=True)
class Problem:
    """A single multiplication problem as displayed to the player."""

    factor_a: int
    factor_b: int

    @property
    def answer(self) -> int:
        return self.factor_a * self.factor_b

    @property
    def key(self) -> str:
        """Identity used to avoid repeating a problem."""
        return f"{self.factor_a}×{self.factor_b}"


@dataclass
class ProblemTimer:
    """Countdown for the current problem, in seconds of elapsed time."""

    maximum: float
    remaining: float = 0.0
    active: bool = False
    expired: bool = False

    def reset(self) -> None:
        """Fill the timer without starting it."""
        self.remaining = self.maximum
        self.active = False
        self.expired = False

    def start(self) -> None:
        self.reset()
        self.active = True

    def stop(self) -> None:
        self.active = False

    def update(self, dt: float) -> None:
        if not self.active or dt <= 0:
            return
        self.remaining = max(0.0, self.remaining - dt)
        if self.remaining == 0.0:
            self.active = False
            self.expired = True

    @property
    def fraction(self) -> float:
        """Remaining time as a fraction of the maximum (1.0 = full time)."""
        return self.remaining / self.maximum


class ProblemLifecycle:
    """Generates problems from selected tables and scores answers against a timer.

    Boost strength is linear in remaining time: a full timer gives
    ``boost_scale``, an expired timer gives nothing.
    """

    def __init__(
        self,
        selected_tables: list[int],
        duration: float = 6.0,
        boost_scale: float = 1.0,
        rng: np.random.Generator | None = None,
    ):
        """Initialize the problem lifecycle.

        Args:
            selected_tables: Multiplication tables to draw the first factor from
            duration: Seconds available per problem
            boost_scale: Boost multiplier at full remaining time
            rng: Random number generator
        """
        if not selected_tables:
            raise ValueError("selected_tables must not be empty")
        self.selected_tables = list(selected_tables)
        self.boost_scale = boost_scale
        self.rng = rng if rng is not None else np.random.default_rng()
        self.timer = ProblemTimer(maximum=duration)
        self.current: Problem | None = None
        self.used_keys: set[str] = set()

    def generate(self, selected_tables: list[int] | None = None) -> Problem:
        """Generate a problem not yet seen in this session.

        At least one factor comes from the selected tables, the other from
        2-10, in random display order. When no unused combination turns up
        within the attempt bound, the used set is cleared and the last
        candidate is accepted.

        Args:
            selected_tables: Override for the configured tables

        Returns:
            The new current problem
        """
        tables = selected_tables or self.selected_tables
        low, high = SECOND_FACTOR_RANGE

        problem = None
        for _ in range(MAX_GENERATION_ATTEMPTS):
            table = int(self.rng.choice(tables))
            other = int(self.rng.integers(low, high + 1))
            if self.rng.random() < 0.5:
                problem = Problem(table, other)
            else:
                problem = Problem(other, table)
            if problem.key not in self.used_keys:
                break
        else:
            logger.debug("All problem combinations used, clearing used set")
            self.used_keys.clear()

        self.used_keys.add(problem.key)
        self.current = problem
        self.timer.reset()
        logger.debug("New problem: %s = %d", problem.key, problem.answer)
        return problem

    def start_timer(self) -> None:
        self.timer.start()

    def stop_timer(self) -> None:
        self.timer.stop()

    def update_timer(self, dt: float) -> None:
        """Count the timer down.

        Args:
            dt: Elapsed time in seconds
        """
        self.timer.update(dt)

    @property
    def remaining_fraction(self) -> float:
        return self.timer.fraction

    @property
    def timed_out(self) -> bool:
        """Whether the timer ran out (as opposed to being stopped early)."""
        return self.timer.expired

    def calculate_boost(self) -> float:
        """Boost multiplier from the remaining time fraction."""
        return self.timer.fraction * self.boost_scale

    def check_answer(self, value: object) -> bool:
        """Check a player answer against the current problem.

        Args:
            value: Answer as int or numeric string

        Returns:
            True on an exact match; non-numeric input never matches
        """
        if self.current is None or isinstance(value, bool):
            return False
        if isinstance(value, (int, np.integer)):
            return int(value) == self.current.answer
        if isinstance(value, float):
            return value.is_integer() and int(value) == self.current.answer
        try:
            answer = int(str(value).strip())
        except ValueError:
            return False
        return answer == self.current.answer
