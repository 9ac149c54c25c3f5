"""
Shared fixtures for the StayEase API tests.

The app runs against an in-memory mongomock database and a stub payment
gateway, both injected through FastAPI dependency overrides.
"""
import os

os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret")

from unittest.mock import patch

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import issue_token
from config import Config
from database import get_db, USERS, APARTMENTS
from payments import get_payment_gateway
from main import app

TEST_SECRET = "test-secret"


class StubGateway:
    """Records requested prices instead of calling Stripe"""

    def __init__(self):
        self.prices = []

    def create_intent(self, price):
        self.prices.append(price)
        return f"pi_test_secret_{int(round(price * 100))}"


@pytest.fixture
def db():
    return mongomock.MongoClient()["stayease_test"]


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def client(db, gateway):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with patch.object(Config, "ACCESS_TOKEN_SECRET", TEST_SECRET):
        yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def add_user(db):
    def _add(email, role="user"):
        db[USERS].insert_one({"email": email, "name": email.split("@")[0], "role": role})
        return email
    return _add


@pytest.fixture
def add_apartment(db):
    def _add(rent, status="available", **extra):
        doc = {"apartmentNo": f"A-{rent}", "floorNo": 1, "blockName": "A", "rent": rent, "status": status}
        doc.update(extra)
        return str(db[APARTMENTS].insert_one(doc).inserted_id)
    return _add


@pytest.fixture
def auth_for(client):
    """Authorization header for a given email; requires the client fixture's secret"""
    def _header(email):
        return {"Authorization": f"Bearer {issue_token({'email': email})}"}
    return _header


@pytest.fixture
def admin_headers(add_user, auth_for):
    return auth_for(add_user("admin@stayease.com", "admin"))


@pytest.fixture
def member_headers(add_user, auth_for):
    return auth_for(add_user("member@stayease.com", "member"))


@pytest.fixture
def user_headers(add_user, auth_for):
    return auth_for(add_user("user@stayease.com", "user"))
