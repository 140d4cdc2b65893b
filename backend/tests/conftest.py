"""
Pytest fixtures for Stockroom backend tests.

Every app-level fixture is parametrized over both record store backends so
the same assertions cover the SQL and in-memory implementations.
"""

import pytest
from stockroom import create_app
from stockroom.extensions import db
from stockroom.stores import get_record_store


STORE_BACKENDS = ["memory", "sql"]

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'BCRYPT_ROUNDS': 4,
    'LOG_LEVEL': 'WARNING',
}

DEFAULT_USERNAME = "ADMIN"
DEFAULT_PASSWORD = "ADMIN1234"


def build_app(backend: str, **overrides):
    config = dict(TEST_CONFIG, STORE_BACKEND=backend)
    config.update(overrides)
    return create_app(config)


@pytest.fixture(params=STORE_BACKENDS)
def backend(request):
    return request.param


@pytest.fixture
def app_overrides():
    """Override in a test module to tweak config for every app it builds."""
    return {}


@pytest.fixture
def app(backend, app_overrides):
    """Create application with a fresh database/store for each test."""
    app = build_app(backend, **app_overrides)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def store(app):
    return get_record_store()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def register(client, username: str = DEFAULT_USERNAME, password: str = DEFAULT_PASSWORD):
    return client.post('/api/auth/register', json={
        'username': username,
        'password': password,
    })


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def headers(client):
    """Authorization headers for a freshly registered user."""
    response = register(client)
    assert response.status_code == 201, response.get_json()
    return auth_headers(response.get_json()['token'])


@pytest.fixture
def register_user(client):
    """Callable fixture: register_user(username, password) -> response."""
    def _register(username: str = DEFAULT_USERNAME, password: str = DEFAULT_PASSWORD):
        return register(client, username, password)
    return _register
