import pytest

from skyfighter.collaborators import AudioSink
from skyfighter.simulation import Simulation


class RecordingAudio(AudioSink):
    def __init__(self):
        self.events = []

    def play(self, event, detail=None):
        self.events.append((event, detail))

    def names(self):
        return [name for name, _ in self.events]


class FakeStore:
    def __init__(self, high_score=0):
        self.high_score = high_score
        self.saved = []

    def load(self):
        return self.high_score

    def save(self, score):
        self.saved.append(score)


FRAME_MS = 16.0


def run_ticks(sim, n, start, step=FRAME_MS):
    """Tick n frames from ``start`` and return the last timestamp used"""
    now = start
    for _ in range(n):
        now += step
        sim.tick(step, now=now)
    return now


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def sim(audio, store):
    s = Simulation(width=800, height=600, audio=audio, store=store,
                   clock=lambda: 0.0, seed=1234)
    s.start_run(now=0.0)
    return s
