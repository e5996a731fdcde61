"""Console output formatting."""

from mathrace.simulation.events import EventType, RaceEvent
from mathrace.simulation.race import TickSnapshot
from mathrace.simulation.statistics import RaceResults, format_time


class ConsoleOutput:
    """Formats race progress and results for console display."""

    @staticmethod
    def print_event(event: RaceEvent) -> None:
        """Print a single race event as one timestamped line.

        Args:
            event: Event from a tick snapshot
        """
        stamp = f"[{format_time(event.time):>9}]"

        if event.event_type == EventType.PROBLEM_STARTED and event.problem is not None:
            print(f"{stamp} {event.problem.factor_a} x {event.problem.factor_b} = ?")
        elif event.event_type == EventType.ANSWER_CORRECT:
            source = event.source.value if event.source else "?"
            print(f"{stamp}   {event.answer} ({source}) correct, boost {event.boost:.2f}")
        elif event.event_type == EventType.ANSWER_INCORRECT:
            print(f"{stamp}   {event.answer} is wrong, try again")
        elif event.event_type == EventType.TIMEOUT and event.problem is not None:
            print(f"{stamp}   time up! ({event.problem.key} = {event.problem.answer})")
        elif event.event_type == EventType.LAP_COMPLETED and event.lap is not None:
            marker = " (final)" if event.lap.is_final_lap else ""
            print(f"{stamp} LAP {event.lap.lap_number}: {format_time(event.lap.lap_time)}{marker}")
        else:
            print(f"{stamp} {event.description}")

    @staticmethod
    def print_status(snapshot: TickSnapshot) -> None:
        """Print a one-line HUD: lap, speed, problem and timer bar.

        Args:
            snapshot: Snapshot returned by the race loop
        """
        bar_width = 20
        filled = int(round(snapshot.remaining_fraction * bar_width))
        bar = "#" * filled + "-" * (bar_width - filled)
        problem = snapshot.problem.key if snapshot.problem else "-"
        print(
            f"Lap {snapshot.current_lap:<2} "
            f"{format_time(snapshot.current_lap_time):>9}  "
            f"speed {snapshot.velocity:.3f}  "
            f"pos {snapshot.position:.3f}  "
            f"{problem:<6} [{bar}]"
        )

    @staticmethod
    def print_race_results(results: RaceResults, player_name: str = "Pilote") -> None:
        """Print final race results to console.

        Args:
            results: Final results from the race loop
            player_name: Name shown in the header
        """
        print("\n" + "=" * 40)
        print(f"RACE RESULTS - {player_name}")
        print("=" * 40)
        print(f"{'Total time':<16} {format_time(results.total_time)}")
        print(f"{'Best lap':<16} {format_time(results.best_lap_time)}")
        print("-" * 40)

        for lap_number, lap_time in enumerate(results.lap_times, 1):
            best = " *" if lap_time == results.best_lap_time else ""
            print(f"{'Lap ' + str(lap_number):<16} {format_time(lap_time)}{best}")

        print("-" * 40)
        print(f"{'Correct':<16} {results.correct_answers} / {results.total_answers}")
        print(f"{'Accuracy':<16} {results.accuracy}%")
        print("=" * 40)
