"""Shared fixtures for the API tests."""

import pytest
from fastapi.testclient import TestClient

from floorplan.core.config import Settings
from floorplan.main import create_app

MANAGER_PASSWORD = "manager-pass"
STAFF_PASSWORD = "staff-pass"


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway database."""
    return Settings(
        testing=True,
        rooms_db_uri=str(tmp_path / "rooms.db"),
        auth_password=MANAGER_PASSWORD,
        staff_password=STAFF_PASSWORD,
        jwt_secret="test-secret",
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


def login(client, password=MANAGER_PASSWORD, restaurant_id="resto-1"):
    """Log in and return the Authorization header for the new session."""
    response = client.post(
        "/api/v1/auth/login",
        json={"password": password, "restaurant_id": restaurant_id},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def manager(client):
    return login(client)


@pytest.fixture
def staff(client):
    return login(client, STAFF_PASSWORD)


@pytest.fixture
def room_id(client, manager):
    response = client.post("/api/v1/rooms/", json={"name": "Main"}, headers=manager)
    assert response.status_code == 201, response.text
    return response.json()["id"]
