import os
import sys
import pytest

# Ensure the backend root (containing the `gamecenter` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gamecenter import create_app, db


class TestConfig:
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = False
    REG_AUTH_CODE = '666'
    MIN_USERNAME_LENGTH = 4
    MIN_PASSWORD_LENGTH = 6
    # Cheapest bcrypt cost keeps the suite fast
    BCRYPT_LOG_ROUNDS = 4
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    RECORD_RETENTION_DAYS = 7
    RECORD_PURGE_INTERVAL_SEC = 0
    CORS_ORIGINS = ['*']
    STATIC_DIR = None
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import gamecenter.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def register(client):
    def _register(username='user1', password='secret1', auth_code='666'):
        return client.post('/api/register', json={
            'username': username,
            'password': password,
            'authCode': auth_code,
        })
    return _register


@pytest.fixture()
def sync(client):
    def _sync(records, username='user1'):
        return client.post('/api/records', json={'username': username, 'records': records})
    return _sync
