import os
import random
import sys
import pytest

# Ensure the backend root (containing the `dart_counter` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from dart_counter import create_app, current_session, db, socketio
from dart_counter.services.match.scheduler import ManualScheduler
from dart_counter.services.match.session import MatchSession


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEG_ADVANCE_DELAY_SEC = 0
    BOT_DELAY_SEC = 0
    BOT_DELAY_JITTER_SEC = 0
    HISTORY_LIMIT = 50
    BUST_COUNTS_DOUBLE_ATTEMPTS = True
    DEFAULT_CHECKOUT_PERCENT = 0.0


class Recorder:
    """Collects broadcast events in place of the Socket.IO transport."""

    def __init__(self):
        self.events = []

    def __call__(self, event, payload):
        self.events.append((event, payload))

    def named(self, event):
        return [payload for name, payload in self.events if name == event]


class FakeStore:
    def __init__(self):
        self.saved = []

    def save_match(self, state, winner_id):
        self.saved.append((state.to_dict(), winner_id))
        return len(self.saved)

    def records(self, user_id=None):
        return []


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import dart_counter.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_session(flask_app):
    return current_session()


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


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def session(recorder, store):
    """A session with no Flask app behind it: manual timers, recorded broadcasts, fake store."""
    return MatchSession(
        ManualScheduler(),
        recorder,
        store=store,
        rng=random.Random(1234),
        leg_advance_delay=0,
        bot_delay=0,
        bot_delay_jitter=0,
    )
