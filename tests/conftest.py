from types import SimpleNamespace

import httpx
import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import Database
from github import GithubClient
from main import create_app
from schemas import User, to_document
from security import gravatar_url, hash_password

TEST_SETTINGS = Settings(jwt_secret="integration-test-secret-32-bytes-long", log_level="WARNING")

PASSWORD = "secret123"
# bcrypt is slow; hash once for all fixture users
PASSWORD_HASH = hash_password(PASSWORD)


def github_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/users/octocat/repos":
        return httpx.Response(200, json=[{"name": "hello-world", "stargazers_count": 3}])
    return httpx.Response(404, json={"message": "Not Found"})


@pytest.fixture
def database():
    db = Database(mongomock.MongoClient(tz_aware=True), "devconnector_test")
    db.ensure_indexes()
    return db


@pytest.fixture
def github():
    client = GithubClient(base_url="https://api.github.example", transport=httpx.MockTransport(github_handler))
    yield client
    client.close()


@pytest.fixture
def app(database, github):
    return create_app(settings=TEST_SETTINGS, database=database, github=github)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def make_user(database, app):
    """Insert a user straight into the store and return it with auth headers"""
    tokens = app.state.tokens

    def _make(name="Ada", email=None):
        email = email or f"{name.lower()}@example.com"
        doc = to_document(User(name=name, email=email, password_hash=PASSWORD_HASH, avatar=gravatar_url(email)))
        user_id = str(database.users.insert_one(doc).inserted_id)
        return SimpleNamespace(
            id=user_id,
            name=name,
            email=email,
            avatar=doc["avatar"],
            headers={"x-auth-token": tokens.issue(user_id)},
        )

    return _make
