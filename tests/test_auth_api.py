# tests/test_auth_api.py

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from api import security


@pytest.fixture
def anon_client(app_factory):
    return TestClient(app_factory())


def register(client, email="new@example.com", password="correct-horse"):
    return client.post("/users/", json={"email": email, "password": password})


def login(client, email="new@example.com", password="correct-horse"):
    return client.post("/token", data={"username": email, "password": password})


def test_register_and_login(anon_client):
    response = register(anon_client)
    assert response.status_code == 201
    assert response.json()["email"] == "new@example.com"
    assert "hashed_password" not in response.json()

    token = login(anon_client).json()["access_token"]
    me = anon_client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json()["email"] == "new@example.com"


def test_duplicate_registration_is_rejected(anon_client):
    register(anon_client)
    response = register(anon_client)
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_short_password_is_rejected(anon_client):
    assert register(anon_client, password="short").status_code == 422


def test_wrong_password_is_rejected(anon_client):
    register(anon_client)
    assert login(anon_client, password="wrong-password").status_code == 401


def test_invalid_or_expired_token_is_rejected(anon_client):
    register(anon_client)
    expired = security.create_access_token("new@example.com", expires_delta=timedelta(minutes=-1))

    for token in ("garbage", expired):
        response = anon_client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


def test_token_for_unknown_user_is_rejected(anon_client):
    token = security.create_access_token("ghost@example.com")
    response = anon_client.get("/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_round_trip():
    token = security.create_access_token("someone@example.com")
    assert security.decode_access_token(token) == "someone@example.com"
    assert security.decode_access_token(token + "x") is None


def test_missing_secret_key(monkeypatch):
    monkeypatch.setattr(security, "SECRET_KEY", None)
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        security.create_access_token("someone@example.com")


def test_first_registered_user_administers_the_catalog(anon_client):
    first = register(anon_client, email="first@example.com")
    second = register(anon_client, email="second@example.com")
    assert first.json()["is_admin"] is True
    assert second.json()["is_admin"] is False

    body = {"skills": [{"id": "x", "category": "Pull", "level": 1, "requirement": "3 sets of 5 reps"}]}

    token = login(anon_client, email="second@example.com").json()["access_token"]
    response = anon_client.put("/skills/catalog", json=body, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403

    token = login(anon_client, email="first@example.com").json()["access_token"]
    response = anon_client.put("/skills/catalog", json=body, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
