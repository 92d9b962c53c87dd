from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=origins)

    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from memorymatch.main import main
    flask_app.register_blueprint(main)

    from memorymatch.api.scores import api
    # Mount score routes under /api to match frontend API client
    flask_app.register_blueprint(api, url_prefix='/api')

    from memorymatch.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    _register_error_handlers(flask_app)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from memorymatch.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('leaderboard')
    @click.option('--limit', default=10, show_default=True, help='Rows to print (0 for all).')
    def leaderboard_command(limit):
        """Prints the current leaderboard."""
        from memorymatch.services.scores import leaderboard
        with flask_app.app_context():
            entries = leaderboard(limit=limit or None)
            if not entries:
                print('No scores yet.')
                return
            for e in entries:
                print(f"{e['rank']:>3}. {e['player']:<20} {e['score']:>4}  {e['time_left']:>3}s")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(leaderboard_command)

    return flask_app


def _register_error_handlers(flask_app):
    @flask_app.errorhandler(404)
    def not_found(_err):
        return jsonify({'error': 'Endpoint not found'}), 404

    @flask_app.errorhandler(405)
    def method_not_allowed(_err):
        return jsonify({'error': 'Method not allowed'}), 405

    @flask_app.errorhandler(Exception)
    def internal_error(err):
        if isinstance(err, HTTPException):
            return jsonify({'error': err.description}), err.code
        db.session.rollback()
        flask_app.logger.exception(f"[error] unhandled {type(err).__name__}")
        return jsonify({'error': str(err) or 'Internal server error'}), 500
