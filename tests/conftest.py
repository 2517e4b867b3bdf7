import pytest
from fastapi.testclient import TestClient

from technova.api import create_app
from technova.config import Settings
from technova.database import Database
from technova.security import PasswordHasher
from technova.services import UserService


@pytest.fixture
def database():
    """Provide an isolated in-memory database for each test."""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def service(database):
    return UserService(database, PasswordHasher(rounds=4))


@pytest.fixture
def client(database):
    app = create_app(
        Settings(_env_file=None, database_url="sqlite://", bcrypt_rounds=4),
        database=database,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_payload():
    def _make(**overrides):
        payload = {
            "name": "Ada Lovelace",
            "email": "ada@technova.io",
            "password": "Analytic@1843",
            "phone": "+1-555-1234567",
            "role": "developer",
            "skills": ["Python", "AWS"],
        }
        payload.update(overrides)
        return payload

    return _make
