"""Shared fixtures: every test gets its own SQLite file and its own app."""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

import repository
from auth import get_password_hash, make_password_context
from config import Settings
from database import init_db, make_engine, make_sessionmaker
from main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def client(settings):
    """Test client with the lifespan running, so tables exist."""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user and return auth headers for it."""
    def _register(username="alice", password="pw123"):
        response = client.post("/api/auth/register", json={"username": username, "password": password})
        assert response.status_code == 201
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _register


@pytest.fixture
def pwd_context():
    return make_password_context(rounds=4)


@pytest_asyncio.fixture
async def session(settings):
    engine = make_engine(settings.database_url)
    await init_db(engine)
    new_session = make_sessionmaker(engine)
    async with new_session() as db_session:
        yield db_session
    await engine.dispose()


@pytest_asyncio.fixture
async def user(session, pwd_context):
    new_user = await repository.insert_user(session, "alice", get_password_hash(pwd_context, "pw123"))
    await repository.commit(session)
    return new_user
