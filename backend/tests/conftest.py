import os
import sys
import pytest

# Ensure the backend root (containing the `spectrum` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from spectrum import create_app, socketio
from spectrum.services.show import GameController, GameState


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    NUM_TURNS = 2
    TICK_INTERVAL_MS = 10
    HEARTBEAT_INTERVAL_SEC = 0


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now=1_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


class Recorder:
    """Collects controller notifications in emission order."""

    def __init__(self, controller):
        self.events = []
        for name in ('heartbeat', 'turnChange', 'phaseChange', 'gameOver', 'phaseEdit', 'turnEdit', 'turnOrderEdit'):
            controller.subscribe(name, self._listener(name))

    def _listener(self, name):
        def _record(*args):
            self.events.append((name, args[0] if args else None))
        return _record

    def names(self):
        return [name for name, _ in self.events]

    def count(self, name):
        return self.names().count(name)

    def last(self, name):
        for event, data in reversed(self.events):
            if event == name:
                return data
        return None

    def clear(self):
        self.events = []


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def game(clock):
    return GameState(2, clock=clock)


@pytest.fixture()
def controller(game):
    return GameController(game)


@pytest.fixture()
def recorder(controller):
    return Recorder(controller)


@pytest.fixture()
def flask_app(clock):
    application = create_app(TestConfig)
    application.extensions['spectrum'].controller.game.clock = clock
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/socket'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/socket')
    except Exception:
        pass
