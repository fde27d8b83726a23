import logging
from datetime import timedelta

import click
from flask import Flask
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import Config, validate_config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    validate_config(flask_app.config)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)

    origins = [o.strip() for o in flask_app.config['CORS_ORIGINS'].split(',') if o.strip()]
    CORS(flask_app, origins=origins if origins != ['*'] else '*')

    # Token signing is configured once here and shared by every request
    from quiztopia.services.tokens import TokenService
    flask_app.extensions['token_service'] = TokenService(
        secret=flask_app.config['JWT_SECRET'],
        lifetime=timedelta(minutes=int(flask_app.config['JWT_EXPIRATION_MINUTES'])),
        algorithm=flask_app.config['JWT_ALGORITHM'],
    )

    # Bearer-token authentication for Flask-Login (no server-side session)
    from quiztopia.services import auth
    auth.init_login_manager(login_manager)

    from quiztopia.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Import and register blueprints here
    from quiztopia.main import main
    flask_app.register_blueprint(main)

    from quiztopia.api.quizzes import quizzes
    flask_app.register_blueprint(quizzes, url_prefix='/api/quiz')

    from quiztopia.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from quiztopia.services.credentials import create_user
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            for u in ['testuser1', 'testuser2', 'testuser3']:
                create_user(email=f'{u}@example.com', username=u, password='password')

            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
