#!/usr/bin/env python3
"""Example: Simulate a race answered by voice.

A fake speech engine turns the simulated player's answers into French
transcripts, delivering an interim result followed by a delayed final
result, the way browser engines do. Transient engine errors are injected
to exercise the automatic restart.

Usage:
    python examples/simulate_race.py [--tables 2 3 7] [--laps N] [--seed S]

Examples:
    python examples/simulate_race.py --tables 7 8 9 --laps 2
    python examples/simulate_race.py --keyboard --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from mathrace.models import RaceConfig
from mathrace.output import ConsoleOutput
from mathrace.simulation import EventType, RaceLoop
from mathrace.speech import AnswerRecognizer, RecognitionErrorKind, TranscriptEvent

FRAME_MS = 1000.0 / 60.0

UNITS = ["zéro", "un", "deux", "trois", "quatre", "cinq", "six", "sept", "huit", "neuf",
         "dix", "onze", "douze", "treize", "quatorze", "quinze", "seize"]
TENS = {2: "vingt", 3: "trente", 4: "quarante", 5: "cinquante", 6: "soixante", 8: "quatre-vingt"}


def french_words(n: int) -> str:
    """Spell 0-100 in French, the way a transcription engine would."""
    if n == 100:
        return "cent"
    if n <= 16:
        return UNITS[n]
    if n < 20:
        return f"dix-{UNITS[n - 10]}"
    tens, unit = divmod(n, 10)
    if tens in (7, 9):
        base, rest = TENS[tens - 1], 10 + unit
        joiner = " et " if tens == 7 and unit == 1 else "-"
        return f"{base}{joiner}{french_words(rest)}"
    if unit == 0:
        return TENS[tens]
    joiner = " et " if unit == 1 and tens != 8 else "-"
    return f"{TENS[tens]}{joiner}{UNITS[unit]}"


class FakeSpeechEngine:
    """Stand-in engine; transcripts are pushed by the voice bot."""

    supported = True

    def __init__(self):
        self.running = False
        self.starts = 0

    def start(self) -> None:
        self.running = True
        self.starts += 1

    def stop(self) -> None:
        self.running = False


class VoiceBot:
    """Speaks answers after a reaction delay; the engine reports interim then final."""

    def __init__(self, rng: np.random.Generator, recognizer: AnswerRecognizer, accuracy: float):
        self.rng = rng
        self.recognizer = recognizer
        self.accuracy = accuracy
        self.pending: list[tuple[float, str, bool]] = []

    def on_problem(self, now: float, correct_answer: int) -> None:
        spoken_at = now + max(0.5, self.rng.normal(1.8, 0.6)) * 1000.0
        answer = correct_answer if self.rng.random() < self.accuracy else correct_answer + 1
        text = french_words(min(answer, 100))
        if self.rng.random() < 0.2:
            text = f"euh {text}"
        self.pending.append((spoken_at, text, False))
        self.pending.append((spoken_at + 400.0, text, True))

    def act(self, now: float) -> None:
        due = [item for item in self.pending if item[0] <= now]
        self.pending = [item for item in self.pending if item[0] > now]
        for timestamp, text, is_final in due:
            self.recognizer.handle_result(TranscriptEvent(text=text, is_final=is_final, timestamp=timestamp))
        # Occasional silence timeout from the engine
        if self.rng.random() < 0.001:
            self.recognizer.handle_error(RecognitionErrorKind.NO_SPEECH, now)


def main():
    parser = argparse.ArgumentParser(description="Simulate a voice-controlled multiplication race")
    parser.add_argument(
        "--tables",
        type=int,
        nargs="+",
        default=[2, 3, 4, 5],
        help="Multiplication tables to practice (default: 2 3 4 5)",
    )
    parser.add_argument(
        "--laps",
        type=int,
        default=3,
        help="Number of laps (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for problems and the simulated player",
    )
    parser.add_argument(
        "--accuracy",
        type=float,
        default=0.9,
        help="Probability the simulated player answers correctly (default: 0.9)",
    )
    parser.add_argument(
        "--keyboard",
        action="store_true",
        help="Simulate a platform without speech support",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON tuning file overriding the default configuration",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging from the race core",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.config:
        config = RaceConfig.from_json_file(args.config)
    else:
        config = RaceConfig(selected_tables=args.tables, total_laps=args.laps)

    rng = np.random.default_rng(args.seed)
    engine = None if args.keyboard else FakeSpeechEngine()
    recognizer = AnswerRecognizer(engine=engine)
    loop = RaceLoop(config=config, recognizer=recognizer, rng=rng)
    bot = VoiceBot(rng, recognizer, args.accuracy)

    print("Multiplication Race Simulation")
    print(f"{'=' * 40}")
    print(f"Tables: {config.selected_tables}  Laps: {config.total_laps}")
    print()

    snapshot = loop.start()
    keyboard_only = False
    while loop.is_running:
        for event in snapshot.events:
            ConsoleOutput.print_event(event)
            if event.event_type == EventType.INPUT_FALLBACK:
                keyboard_only = True
            elif event.event_type == EventType.PROBLEM_STARTED:
                if keyboard_only:
                    # Keyboard fallback: type the answer straight away
                    for digit in str(event.problem.answer):
                        loop.press_key(digit)
                    loop.press_key("Enter")
                else:
                    bot.on_problem(loop.now, event.problem.answer)

        bot.act(loop.now)
        snapshot = loop.tick(FRAME_MS)

    for event in snapshot.events:
        ConsoleOutput.print_event(event)

    if loop.results is not None:
        ConsoleOutput.print_race_results(loop.results)
    if isinstance(engine, FakeSpeechEngine):
        print(f"Speech engine starts: {engine.starts}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
