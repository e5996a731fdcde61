#!/usr/bin/env python3
"""Quick race example with a scripted keyboard player.

Runs a full headless race at 60 ticks per second. The simulated player
types an answer after a random reaction time and sometimes gets it wrong.

Usage:
    python examples/quick_race.py
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from mathrace.models import RaceConfig
from mathrace.output import ConsoleOutput
from mathrace.simulation import EventType, RaceLoop

FRAME_MS = 1000.0 / 60.0


class KeyboardBot:
    """Answers each problem after a reaction delay, typing digit by digit."""

    def __init__(self, rng: np.random.Generator, accuracy: float = 0.85, reaction_mean: float = 2.0):
        self.rng = rng
        self.accuracy = accuracy
        self.reaction_mean = reaction_mean
        self.answer_at: float | None = None
        self.answer = ""

    def on_problem(self, now: float, correct_answer: int) -> None:
        reaction = max(0.4, self.rng.normal(self.reaction_mean, 0.7))
        self.answer_at = now + reaction * 1000.0
        if self.rng.random() < self.accuracy:
            self.answer = str(correct_answer)
        else:
            self.answer = str(correct_answer + int(self.rng.choice([-2, -1, 1, 2])))

    def act(self, loop: RaceLoop) -> None:
        if self.answer_at is None or loop.now < self.answer_at:
            return
        for digit in self.answer:
            loop.press_key(digit)
        loop.press_key("Enter")
        self.answer_at = None


def main():
    print("Multiplication Race - Quick Example")
    print("=" * 50)

    rng = np.random.default_rng(42)
    config = RaceConfig(selected_tables=[2, 3, 4, 5], total_laps=3)
    loop = RaceLoop(config=config, rng=rng)
    bot = KeyboardBot(rng)

    print(f"Tables: {config.selected_tables}")
    print(f"Laps: {config.total_laps}")
    print(f"Track length: {loop.track.length:.0f} px")
    print()

    snapshot = loop.start()
    frame = 0
    while loop.is_running:
        for event in snapshot.events:
            ConsoleOutput.print_event(event)
            if event.event_type == EventType.PROBLEM_STARTED:
                bot.on_problem(loop.now, event.problem.answer)
            elif event.event_type == EventType.ANSWER_INCORRECT:
                bot.on_problem(loop.now, event.problem.answer)

        if frame % 120 == 0:
            ConsoleOutput.print_status(snapshot)

        bot.act(loop)
        snapshot = loop.tick(FRAME_MS)
        frame += 1

    for event in snapshot.events:
        ConsoleOutput.print_event(event)

    ConsoleOutput.print_race_results(loop.results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
