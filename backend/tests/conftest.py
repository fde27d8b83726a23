import os
import sys
import pytest

# Ensure the backend root (containing the `quiztopia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quiztopia import create_app, db


class TestConfig:
    __test__ = False

    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_ENV = 'testing'
    LOG_LEVEL = 'DEBUG'
    JWT_SECRET = 'test-jwt-secret'
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRATION_MINUTES = 60
    # Cheapest cost bcrypt accepts; keeps the suite fast
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = '*'
    LEADERBOARD_DEFAULT_LIMIT = 10
    LEADERBOARD_MAX_LIMIT = 100


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    # The app context is only held for setup/teardown: a context left pushed
    # would be reused by every test request and leak Flask-Login's cached user.
    with application.app_context():
        import quiztopia.models  # noqa: F401
        db.create_all()
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture()
def register(client):
    """Register a user over HTTP and return ``(user, token)``."""
    def _register(username='alice', email=None, password='secret123'):
        res = client.post('/api/auth/register', json={
            'username': username,
            'email': email or f'{username}@example.com',
            'password': password,
        })
        assert res.status_code == 201, res.get_json()
        data = res.get_json()['data']
        return data['user'], data['token']
    return _register


@pytest.fixture()
def make_quiz(client):
    """Create a quiz owned by ``token`` and return its payload."""
    def _make_quiz(token, name='Capital Cities', description='Guess the capitals'):
        res = client.post('/api/quiz', json={'name': name, 'description': description},
                          headers=auth_headers(token))
        assert res.status_code == 201, res.get_json()
        return res.get_json()['data']
    return _make_quiz


@pytest.fixture()
def add_question(client):
    def _add_question(token, quiz_id, **overrides):
        payload = {
            'question': 'Which city is this landmark in?',
            'answer': 'Stockholm',
            'longitude': 18.0686,
            'latitude': 59.3293,
        }
        payload.update(overrides)
        return client.post(f'/api/quiz/{quiz_id}/questions', json=payload, headers=auth_headers(token))
    return _add_question
