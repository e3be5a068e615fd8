from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app, handed to the socket router
    from ludo.services.rooms import RoomRegistry
    registry = RoomRegistry(rng=flask_app.config.get('RANDOM_SOURCE'))
    flask_app.extensions['ludo_registry'] = registry

    from ludo.main import main
    flask_app.register_blueprint(main)

    from ludo.socketio_events import register_socketio_handlers
    register_socketio_handlers(registry, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    return flask_app
