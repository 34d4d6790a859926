import pytest
from fastapi.testclient import TestClient

from library_api.app.core.config import Settings
from library_api.app.main import create_app
from library_api.app.services.container import ServiceContainer


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def app(settings):
    # Every test gets its own application and therefore its own in-memory store.
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def services(app) -> ServiceContainer:
    return app.state.services


@pytest.fixture
def member(client):
    response = client.post("/api/members", json={"member_id": 1, "name": "Jane", "age": 30})
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def book(client):
    response = client.post(
        "/api/books",
        json={"book_id": 1, "title": "The Hobbit", "author": "J.R.R. Tolkien", "isbn": "978-0-13-468599-1"},
    )
    assert response.status_code == 200
    return response.json()
