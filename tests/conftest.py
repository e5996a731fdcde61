import pytest

from mathrace.speech import SpeechEngineError


class FakeEngine:
    """Speech engine double that records start/stop calls."""

    def __init__(self, supported: bool = True):
        self.supported = supported
        self.starts = 0
        self.stops = 0
        self.fail = False

    def start(self) -> None:
        if self.fail:
            raise SpeechEngineError("busy")
        self.starts += 1

    def stop(self) -> None:
        self.stops += 1


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()
