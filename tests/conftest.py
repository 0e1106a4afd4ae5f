import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from database import get_db
from main import app


PASSWORD = "password123"


@pytest.fixture
def mongo():
    """A fresh in-memory database per test."""
    return AsyncMongoMockClient()["fitness_test"]


@pytest.fixture
def client(mongo):
    app.dependency_overrides[get_db] = lambda: mongo
    yield TestClient(app)
    app.dependency_overrides.clear()


def run(coro):
    return asyncio.run(coro)


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, name, email, password=PASSWORD):
    response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return auth_headers(data["token"]), data["user"]


@pytest.fixture
def alice(client):
    return register(client, "Alice", "alice@example.com")


@pytest.fixture
def bob(client):
    return register(client, "Bob", "bob@example.com")


@pytest.fixture
def admin(client, mongo):
    headers, user = register(client, "Admin", "admin@example.com")
    run(mongo.users.update_one({"email": "admin@example.com"}, {"$set": {"role": "admin"}}))
    user["role"] = "admin"
    return headers, user


def exercise_payload(name, **extra):
    return {"name": name, "category": "strength", "difficulty": "beginner", **extra}


def workout_payload(name, exercises=(), **extra):
    return {"name": name, "category": "strength", "difficulty": "beginner",
            "duration": 30, "exercises": list(exercises), **extra}


def create(client, path, payload, headers):
    response = client.post(path, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]
