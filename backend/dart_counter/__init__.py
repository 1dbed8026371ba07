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
    "http://localhost:3100",
    "http://127.0.0.1:3100",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

SESSION_KEY = 'dart_counter'


def current_session():
    """The MatchSession owned by the running app."""
    return current_app.extensions[SESSION_KEY]


def _broadcast(event, payload):
    socketio.emit(event, payload, namespace='/ws')


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One live match per app; deferred tasks are driven by hand in tests
    from dart_counter.services.match.scheduler import BackgroundScheduler, ManualScheduler
    from dart_counter.services.match.session import MatchSession
    from dart_counter.services.match.store import MatchStore
    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler = ManualScheduler(flask_app.logger)
    else:
        scheduler = BackgroundScheduler(socketio, flask_app.logger)
    flask_app.extensions[SESSION_KEY] = MatchSession.from_app(
        flask_app, scheduler, _broadcast, store=MatchStore(flask_app)
    )

    # Import and register blueprints here
    from dart_counter.main import main
    flask_app.register_blueprint(main)

    from dart_counter.api.match import match
    flask_app.register_blueprint(match, url_prefix='/api/match')

    from dart_counter.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    from dart_counter.api.stats import stats
    flask_app.register_blueprint(stats, url_prefix='/api')

    # Register Socket.IO event handlers on the initialized socketio instance
    from dart_counter.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    @click.option('--seed/--no-seed', default=True, help='Create two sample users.')
    def db_reset_command(seed):
        """Drops, recreates, and seeds the database."""
        from dart_counter.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            if seed:
                for name in ['Player 1', 'Player 2']:
                    db.session.add(User(name=name))

            db.session.commit()
            click.echo('Database has been reset and seeded!' if seed else 'Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
