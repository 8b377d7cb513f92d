import os
import random
import sys

import pytest

# Ensure the backend root (containing the `gamefeed` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gamefeed import create_app, socketio  # noqa: E402
from gamefeed.services.narrative import Narrator  # noqa: E402


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    SIM_SEED = 1234
    EVENT_CATALOG_PATH = None
    EVENT_COOLDOWN_MS = 30000
    EVENT_NOISE = 1.0
    CLOCK_TICK_SEC = 60
    CLOCK_ADVANCE_PROBABILITY = 0.1
    CLOCK_END_PROBABILITY = 0.3
    CLOCK_HEARTBEAT_SEC = 0
    INITIAL_QUARTER = 2
    INITIAL_TIME_REMAINING = '8:45'
    SIMULATION_ENABLED = True
    FALLBACK_SCORE_MIN = 5
    FALLBACK_SCORE_MAX = 29
    OPENAI_API_KEY = None


class AlwaysFires(random.Random):
    """Random source whose uniform draws are always 0.0.

    Wins every probability gate and puts additive noise at its lower bound.
    ``choice``/``randint`` still go through the seeded bit generator.
    """

    def random(self):
        return 0.0


class NeverFires(random.Random):
    def random(self):
        return 0.999999


class FixedClock:
    """Injectable millisecond time source."""

    def __init__(self, start=1_700_000_000_000):
        self.value = start

    def __call__(self):
        return self.value

    def advance(self, ms):
        self.value += ms
        return self.value


class StubNarrator(Narrator):
    def __init__(self, text='Stub narrative', error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate(self, player, stats, event):
        self.calls.append((player, dict(stats), event))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def simulation(flask_app):
    return flask_app.extensions['simulation']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
