# Flask application factory

import logging

from flask import Flask, jsonify
from focusroom.extensions import db, socketio, login_manager
from focusroom.errors import NotAuthenticated, register_error_handlers


def create_app(config=None):
    # Create and configure Flask application
    flask_app = Flask(__name__)

    # Defaults from config.py (and config.json), then the caller's overrides
    import config as default_config
    flask_app.config.from_object(default_config)
    if config:
        flask_app.config.from_object(config)

    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions
    db.init_app(flask_app)
    socketio.init_app(flask_app, async_mode=flask_app.config.get('SOCKETIO_ASYNC_MODE'))
    login_manager.init_app(flask_app)

    # Every API caller gets JSON, never a login redirect
    @login_manager.unauthorized_handler
    def _unauthorized():
        return jsonify(NotAuthenticated().to_dict()), NotAuthenticated.status_code

    @login_manager.user_loader
    def load_user(user_id):
        from focusroom.models import User
        return db.session.get(User, user_id)

    register_error_handlers(flask_app)

    # Register blueprints
    from focusroom.routes import auth_bp, rooms_bp, presence_bp, stats_bp, chat_bp
    flask_app.register_blueprint(auth_bp)
    flask_app.register_blueprint(rooms_bp)
    flask_app.register_blueprint(presence_bp)
    flask_app.register_blueprint(stats_bp)
    flask_app.register_blueprint(chat_bp)

    # Import socket handlers
    import focusroom.sockets  # noqa

    # Create database tables and patch legacy schemas
    with flask_app.app_context():
        _init_database(flask_app)

    return flask_app


# Columns added to participant after the first release, with their backfill
_PARTICIPANT_UPGRADES = (
    ('timer_type', "VARCHAR(10) DEFAULT 'pomodoro'"),
    ('pomodoro_count', 'INTEGER DEFAULT 0'),
    ('timer_version', 'INTEGER DEFAULT 0'),
)


def _init_database(flask_app):
    # Initialize database tables
    from sqlalchemy import inspect, text
    from focusroom import models  # noqa: F401  (register tables)

    db.create_all()

    inspector = inspect(db.engine)
    if 'participant' not in inspector.get_table_names():
        return

    columns = [col['name'] for col in inspector.get_columns('participant')]
    for name, ddl in _PARTICIPANT_UPGRADES:
        if name in columns:
            continue
        flask_app.logger.info("[DB UPGRADE] Adding participant.%s", name)
        with db.engine.begin() as conn:
            conn.execute(text(f'ALTER TABLE participant ADD COLUMN {name} {ddl}'))


logging.getLogger('focusroom').addHandler(logging.NullHandler())
