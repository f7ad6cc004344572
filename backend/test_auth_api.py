"""
Tests for the signup/login/refresh/me endpoints backed by an in-memory user store.
"""

import pytest

from athena.api.dependencies import get_auth_service
from athena.repository.user_repository import UserRepository
from athena.services.auth_service import AuthService
from main import app

SIGNUP = {"name": "Ada Lovelace", "email": "ada@example.com", "password": "Analytical1"}


@pytest.fixture
def auth_client(client, mongo_db, token_service):
    service = AuthService(UserRepository(mongo_db["users"]), token_service)
    app.dependency_overrides[get_auth_service] = lambda: service
    return client


def test_signup_returns_tokens_and_user(auth_client):
    response = auth_client.post("/api/auth/signup", json=SIGNUP)

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["refresh_token"]
    assert body["user"]["email"] == "ada@example.com"
    assert "password_hash" not in body["user"]


def test_signup_rejects_duplicate_email(auth_client):
    auth_client.post("/api/auth/signup", json=SIGNUP)
    response = auth_client.post("/api/auth/signup", json={**SIGNUP, "email": "ADA@example.com"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
def test_signup_validates_password(auth_client, password):
    response = auth_client.post("/api/auth/signup", json={**SIGNUP, "password": password})
    assert response.status_code == 422


def test_login(auth_client):
    auth_client.post("/api/auth/signup", json=SIGNUP)

    ok = auth_client.post("/api/auth/login", json={"email": SIGNUP["email"], "password": SIGNUP["password"]})
    assert ok.status_code == 200
    assert ok.json()["user"]["name"] == "Ada Lovelace"

    wrong = auth_client.post("/api/auth/login", json={"email": SIGNUP["email"], "password": "Wrong1234"})
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "Invalid email or password"

    unknown = auth_client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "Wrong1234"})
    assert unknown.status_code == 401


def test_me_and_refresh(auth_client):
    tokens = auth_client.post("/api/auth/signup", json=SIGNUP).json()

    me = auth_client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == tokens["user"]["id"]

    refreshed = auth_client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]

    # An access token is not accepted as a refresh token
    rejected = auth_client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert rejected.status_code == 401


def test_me_rejects_refresh_token(auth_client):
    tokens = auth_client.post("/api/auth/signup", json=SIGNUP).json()

    response = auth_client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})

    assert response.status_code == 401


def test_logout(client):
    response = client.post("/api/auth/logout")
    assert response.json() == {"message": "Logged out successfully"}


def test_protected_route_requires_token(client):
    # FastAPI answers a missing bearer header with 403 (401 on newer releases)
    assert client.get("/api/conversations").status_code in (401, 403)

    bad = client.get("/api/conversations", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Authentication required"


def test_root_and_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["endpoints"]["fact_check"] == "/api/fact-check"
