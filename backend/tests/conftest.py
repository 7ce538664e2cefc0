import os
import sys
import pytest
from flask import g

# Ensure the backend root (containing the `arcade` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arcade import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = ['http://localhost:5173']
    STARTING_TOKENS = 1000
    EXCHANGE_RATE = 10
    SESSION_MAX_AGE_SEC = 7 * 24 * 3600
    LEADERBOARD_LIMIT = 100
    HISTORY_LIMIT = 50
    ADMIN_SEARCH_LIMIT = 20
    OWNER_USERNAME = None


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    # Test-client requests reuse the fixture's app context, so forget the
    # account Flask-Login cached on g or the next request inherits it.
    @application.teardown_request
    def forget_login_user(exc):
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import arcade.models  # noqa: F401
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
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def make_account(flask_app):
    """Register an account directly through the service and optionally set its role."""
    from arcade import store
    from arcade.models import Role
    from arcade.services.accounts import register

    def _make(username, role=Role.PLAYER, password='pw123'):
        account, token = register(username, f'{username}@x.com', password)
        if role is not Role.PLAYER:
            store.update_account_role(account.id, role)
            db.session.commit()
        return account, token

    return _make


def auth(token):
    return {'Authorization': f'Bearer {token}'}
