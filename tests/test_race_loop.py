import numpy as np
import pytest

from mathrace.models import RaceConfig
from mathrace.simulation import EventType, RaceLoop, RacePhase
from mathrace.speech import AnswerRecognizer, InputSource, TranscriptEvent

FRAME_MS = 1000.0 / 60.0


def _config(**overrides) -> RaceConfig:
    settings = {"total_laps": 1, "physics": {"friction": 1.0}}
    settings.update(overrides)
    return RaceConfig(**settings)


def _loop(config: RaceConfig | None = None, engine=None, seed: int = 3) -> RaceLoop:
    return RaceLoop(
        config=config or _config(),
        recognizer=AnswerRecognizer(engine=engine),
        rng=np.random.default_rng(seed),
    )


def _type_answer(loop: RaceLoop, value: int) -> None:
    for digit in str(value):
        loop.press_key(digit)
    loop.press_key("Enter")


def _events(loop: RaceLoop, event_type: EventType):
    return [event for event in loop.history if event.event_type is event_type]


def _run(loop: RaceLoop, duration_ms: float, step_ms: float = FRAME_MS):
    events = []
    elapsed = 0.0
    while elapsed < duration_ms:
        events.extend(loop.tick(step_ms).events)
        elapsed += step_ms
    return events


def test_keyboard_race_runs_to_finish():
    loop = _loop()
    snapshot = loop.start()
    assert snapshot.phase is RacePhase.RUNNING

    for _ in range(60 * 120):
        for event in snapshot.events:
            if event.event_type is EventType.PROBLEM_STARTED:
                _type_answer(loop, event.problem.answer)
        if not loop.is_running:
            break
        snapshot = loop.tick(FRAME_MS)

    assert loop.phase is RacePhase.FINISHED
    results = loop.results
    assert results is not None
    assert len(results.lap_times) == 1
    assert results.total_time == pytest.approx(results.lap_times[0])
    assert results.correct_answers == results.total_answers
    assert results.accuracy == 100
    assert _events(loop, EventType.RACE_FINISHED)
    assert loop.scheduler.pending == 0


def test_first_answer_gets_full_boost():
    loop = _loop()
    problem = loop.start().events[-1].problem
    _type_answer(loop, problem.answer)
    snapshot = loop.tick(FRAME_MS)

    [correct] = [e for e in snapshot.events if e.event_type is EventType.ANSWER_CORRECT]
    assert correct.boost == pytest.approx(1.0)
    assert correct.source is InputSource.KEYBOARD
    assert snapshot.velocity == pytest.approx(0.05)
    assert snapshot.position > 0.0


def test_next_problem_follows_correct_answer_after_delay():
    loop = _loop()
    problem = loop.start().events[-1].problem
    _type_answer(loop, problem.answer)
    loop.tick(FRAME_MS)

    assert not [e for e in _run(loop, 400.0) if e.event_type is EventType.PROBLEM_STARTED]
    assert [e for e in _run(loop, 200.0) if e.event_type is EventType.PROBLEM_STARTED]


def test_wrong_typed_answer_is_recorded_and_retry_allowed():
    loop = _loop()
    problem = loop.start().events[-1].problem
    _type_answer(loop, problem.answer + 1)
    snapshot = loop.tick(FRAME_MS)
    assert [e.event_type for e in snapshot.events] == [EventType.ANSWER_INCORRECT]
    assert loop.problems.timer.active

    _type_answer(loop, problem.answer)
    snapshot = loop.tick(FRAME_MS)
    assert [e.event_type for e in snapshot.events] == [EventType.ANSWER_CORRECT]
    assert loop.stats.total_answers == 2
    assert loop.stats.correct_answers == 1


def test_timeout_counts_as_incorrect():
    loop = _loop()
    loop.start()
    events = _run(loop, 7000.0, step_ms=100.0)

    timeouts = [e for e in events if e.event_type is EventType.TIMEOUT]
    assert len(timeouts) == 1
    assert 6000.0 <= timeouts[0].time <= 6100.0
    assert loop.stats.total_answers == 1
    assert loop.stats.correct_answers == 0
    assert loop.vehicle.velocity == 0.0

    restarted = [e for e in events if e.event_type is EventType.PROBLEM_STARTED]
    assert len(restarted) == 1
    assert restarted[0].time - timeouts[0].time == pytest.approx(200.0)


def test_keyboard_fallback_reported_once():
    loop = _loop()
    snapshot = loop.start()
    assert EventType.INPUT_FALLBACK in [e.event_type for e in snapshot.events]
    _run(loop, 1000.0)
    assert len(_events(loop, EventType.INPUT_FALLBACK)) == 1


def test_spoken_answer_scores(engine):
    loop = _loop(engine=engine)
    problem = loop.start().events[-1].problem
    assert not _events(loop, EventType.INPUT_FALLBACK)

    loop.tick(100.0)
    loop.recognizer.handle_result(TranscriptEvent(str(problem.answer), False, loop.now))
    loop.recognizer.handle_result(TranscriptEvent(str(problem.answer), True, loop.now + 50.0))
    snapshot = loop.tick(FRAME_MS)

    [correct] = [e for e in snapshot.events if e.event_type is EventType.ANSWER_CORRECT]
    assert correct.source is InputSource.SPEECH
    _run(loop, 100.0)
    assert loop.stats.correct_answers == 1
    assert loop.stats.total_answers == 1


def test_spoken_mismatch_is_noise_by_default(engine):
    loop = _loop(engine=engine)
    problem = loop.start().events[-1].problem
    loop.recognizer.handle_result(TranscriptEvent(str(problem.answer + 1), True, 0.0))
    loop.tick(FRAME_MS)
    assert loop.stats.total_answers == 0
    assert not _events(loop, EventType.ANSWER_INCORRECT)


def test_spoken_mismatch_recorded_when_enabled(engine):
    loop = _loop(config=_config(record_spoken_mismatches=True), engine=engine)
    problem = loop.start().events[-1].problem
    loop.recognizer.handle_result(TranscriptEvent(str(problem.answer + 1), True, 0.0))
    loop.tick(FRAME_MS)
    assert loop.stats.total_answers == 1
    assert len(_events(loop, EventType.ANSWER_INCORRECT)) == 1


def test_engine_fatal_error_mid_race_falls_back(engine):
    loop = _loop(engine=engine)
    loop.start()
    loop.recognizer.handle_error("service-not-allowed", loop.now)
    snapshot = loop.tick(FRAME_MS)
    assert [e.event_type for e in snapshot.events] == [EventType.INPUT_FALLBACK]


def test_read_delay_holds_the_timer():
    loop = _loop(config=_config(timing={"problem_read_delay_ms": 1000.0}))
    loop.start()
    _run(loop, 500.0, step_ms=100.0)
    assert not loop.problems.timer.active
    assert loop.problems.remaining_fraction == 1.0
    _run(loop, 600.0, step_ms=100.0)
    assert loop.problems.timer.active


def test_stop_cancels_pending_transitions():
    loop = _loop()
    problem = loop.start().events[-1].problem
    _type_answer(loop, problem.answer)
    loop.tick(FRAME_MS)
    assert loop.scheduler.pending == 1

    loop.stop()
    assert loop.phase is RacePhase.STOPPED
    assert loop.scheduler.pending == 0
    assert _run(loop, 2000.0) == []
    assert loop.results is None


def test_lifecycle_errors():
    loop = _loop()
    with pytest.raises(RuntimeError):
        loop.tick(FRAME_MS)
    loop.start()
    with pytest.raises(RuntimeError):
        loop.start()


def test_non_finite_frame_time_is_ignored():
    loop = _loop()
    loop.start()
    snapshot = loop.tick(float("nan"))
    assert snapshot.time == 0.0
    assert snapshot.remaining_fraction == 1.0


def test_long_frame_completes_a_single_lap():
    loop = _loop(config=_config(total_laps=3, physics={}))
    loop.start()
    loop.vehicle.velocity = 0.3
    snapshot = loop.tick(11000.0)

    laps = [e for e in snapshot.events if e.event_type is EventType.LAP_COMPLETED]
    assert len(laps) == 1
    assert loop.stats.lap_times == [11000.0]
    assert loop.stats.best_lap_time == 11000.0
    assert loop.phase is RacePhase.RUNNING
    assert snapshot.current_lap == 2


def test_engine_that_never_starts_falls_back_once(engine):
    engine.fail = True
    loop = _loop(engine=engine)
    snapshot = loop.start()
    assert EventType.INPUT_FALLBACK not in [e.event_type for e in snapshot.events]

    _run(loop, 3000.0, step_ms=100.0)
    assert len(_events(loop, EventType.INPUT_FALLBACK)) == 1
    assert engine.starts == 0


def test_engine_recovers_after_failed_start(engine):
    engine.fail = True
    loop = _loop(engine=engine)
    loop.start()
    engine.fail = False
    _run(loop, 1100.0, step_ms=100.0)
    assert engine.starts == 1
    assert loop.recognizer.is_listening
    assert not _events(loop, EventType.INPUT_FALLBACK)
