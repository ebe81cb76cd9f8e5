from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def get_store():
    """Return the document store bound to the current app."""
    return current_app.extensions['gitwars_store']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from gitwars.store.sql import SqlStore
    SqlStore(flask_app, collections=flask_app.config.get('DOCUMENT_COLLECTIONS'))

    from gitwars.main import main
    flask_app.register_blueprint(main)

    from gitwars.api.docs import docs
    flask_app.register_blueprint(docs, url_prefix='/api/docs')

    from gitwars.api.teams import teams
    flask_app.register_blueprint(teams, url_prefix='/api/teams')

    # Importing here binds the handlers to the initialized socketio instance
    from gitwars.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from gitwars.services.timer.state import TimerState
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            path = flask_app.config['TIMER_STATE_PATH']
            defaults = TimerState.default(flask_app.config['TIMER_DEFAULT_SEC'])
            flask_app.extensions['gitwars_store'].create(path, defaults.to_fields())
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
