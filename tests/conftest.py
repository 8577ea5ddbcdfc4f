import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from chatbot_backend.config import Settings
from chatbot_backend.database import ConnectionManager
from chatbot_backend.main import create_app

TEST_MONGODB_URI = "mongodb://localhost:27017/chatbot_test"

CHROME_WINDOWS_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/100.0.4896.127 Safari/537.36"
)
FIREFOX_LINUX_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:120.0) Gecko/20100101 Firefox/120.0"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "mongodb_uri": TEST_MONGODB_URI,
        "upload_dir": str(tmp_path / "uploads"),
        "serverless": True,
        "db_connect_wait_seconds": 0.01,
    }
    values.update(overrides)
    return Settings(**values)


def make_client(settings: Settings, client_factory=None) -> TestClient:
    if client_factory is None:
        mongo = AsyncMongoMockClient(TEST_MONGODB_URI)
        client_factory = lambda *args, **kwargs: mongo  # noqa: E731
    manager = ConnectionManager(settings, client_factory=client_factory)
    return TestClient(create_app(settings=settings, connection_manager=manager))


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def client(settings):
    with make_client(settings) as test_client:
        yield test_client


@pytest.fixture
def chatbot(client):
    """A freshly created chatbot document"""
    response = client.post("/api/chatbots", json={
        "propertyName": "Acme Store",
        "siteUrl": "https://acme.example",
        "name": "Acme Assistant",
    })
    assert response.status_code == 201
    return response.json()
