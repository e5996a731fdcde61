from mathrace.scheduler import Scheduler


def test_runs_due_callbacks_in_time_order():
    scheduler = Scheduler()
    calls = []
    scheduler.schedule(300.0, lambda: calls.append("c"))
    scheduler.schedule(100.0, lambda: calls.append("a"))
    scheduler.schedule(200.0, lambda: calls.append("b"))

    assert scheduler.run_due(250.0) == 2
    assert calls == ["a", "b"]
    assert scheduler.pending == 1


def test_same_due_time_keeps_scheduling_order():
    scheduler = Scheduler()
    calls = []
    for name in "xyz":
        scheduler.schedule(50.0, lambda name=name: calls.append(name))
    scheduler.run_due(50.0)
    assert calls == ["x", "y", "z"]


def test_cancelled_call_does_not_run():
    scheduler = Scheduler()
    calls = []
    handle = scheduler.schedule(10.0, lambda: calls.append("cancelled"))
    scheduler.schedule(20.0, lambda: calls.append("kept"))
    handle.cancel()
    assert scheduler.run_due(100.0) == 1
    assert calls == ["kept"]


def test_cancel_all():
    scheduler = Scheduler()
    calls = []
    scheduler.schedule(10.0, lambda: calls.append(1))
    scheduler.schedule(20.0, lambda: calls.append(2))
    assert scheduler.cancel_all() == 2
    assert scheduler.run_due(1000.0) == 0
    assert calls == []
    assert scheduler.pending == 0


def test_callback_scheduled_while_running_is_picked_up_when_due():
    scheduler = Scheduler()
    calls = []

    def first():
        calls.append("first")
        scheduler.schedule(15.0, lambda: calls.append("chained"))

    scheduler.schedule(10.0, first)
    scheduler.run_due(20.0)
    assert calls == ["first", "chained"]
