import os
import random
import sys
import pytest

# Ensure the backend root (containing the `ludo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from ludo import create_app, socketio
from ludo.models import Color, GameMode
from ludo.services.rooms import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = '/ws'
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    RANDOM_SOURCE = None


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['ludo_registry']


@pytest.fixture()
def make_sio_client(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def room_registry():
    return RoomRegistry(rng=random.Random(1))


@pytest.fixture()
def started_room(room_registry):
    """A started 2-player room: p1 red (to move), p2 yellow."""
    room = room_registry.create_room('p1', 'Alice', GameMode.TWO_PLAYER)
    room_registry.join_room(room.code, 'p2', 'Bob')
    room_registry.choose_color('p1', Color.RED)
    room_registry.choose_color('p2', Color.YELLOW)
    room_registry.set_ready('p1')
    room_registry.set_ready('p2')
    room_registry.start_game('p1')
    return room
