import os
import sys
import pytest

# Ensure the backend root (containing the `gitwars` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gitwars import create_app, db, socketio
from gitwars.services.timer import RepeatingTask
from gitwars.store import MemoryStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TIMER_STATE_PATH = 'gameState/current'
    TIMER_DEFAULT_SEC = 30
    TIMER_TICK_SEC = 0.05
    TIMER_CONSISTENCY = 'cached'
    DOCUMENT_COLLECTIONS = ('gameState',)
    SCORE_STEP = 10


class ManualScheduler:
    """Scheduler driven by an explicit clock so tests decide when ticks fire."""

    def __init__(self):
        self.now = 0.0
        self.tasks = []

    def every(self, interval, fn):
        task = RepeatingTask(fn, interval)
        task.next_due = self.now + interval
        self.tasks.append(task)
        return task

    @property
    def active(self):
        return [t for t in self.tasks if not t.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.active if t.next_due <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.next_due)
            self.now = task.next_due
            task.next_due += task.interval
            task.fn()
        self.now = target


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def store():
    return MemoryStore(collections=['gameState'])


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import gitwars.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


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
