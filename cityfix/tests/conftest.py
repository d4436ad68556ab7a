# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
import mongomock
from datetime import datetime, timezone
from unittest.mock import Mock

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from cityfix.app import create_app
from cityfix.services.mongodb import MongoDBService, USERS, ISSUES, PAYMENTS
from cityfix.services.payment_gateway import StripeGateway

TEST_SECRET = "test-token-secret"


@pytest.fixture
def mongo_client():
    """In-process MongoDB client for testing."""
    client = mongomock.MongoClient()
    yield client
    client.close()


@pytest.fixture
def mongodb_service(mongo_client):
    """MongoDB service bound to the in-process client."""
    return MongoDBService('mongodb://localhost:27017', 'cityfix_test', client=mongo_client)


@pytest.fixture
def users_collection(mongodb_service):
    return mongodb_service.get_collection(USERS)


@pytest.fixture
def issues_collection(mongodb_service):
    return mongodb_service.get_collection(ISSUES)


@pytest.fixture
def payments_collection(mongodb_service):
    return mongodb_service.get_collection(PAYMENTS)


@pytest.fixture
def payment_gateway():
    """Payment gateway double returning a fixed client secret."""
    gateway = Mock(spec=StripeGateway)
    gateway.create_payment_intent.return_value = "pi_test_secret_123"
    return gateway


@pytest.fixture
def app(mongodb_service, payment_gateway):
    """Application wired to the test store and gateway."""
    app = create_app(
        {
            "ENVIRONMENT": "test",
            "TESTING": True,
            "OTEL_ENABLED": False,
            "ACCESS_TOKEN_SECRET": TEST_SECRET
        },
        mongodb_service=mongodb_service,
        payment_gateway=payment_gateway
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(users_collection):
    """Insert a user document directly and return it."""
    def _make_user(email, role="citizen", name=None, **fields):
        document = {
            "email": email,
            "name": name or email.split("@")[0].title(),
            "photo": None,
            "role": role,
            "isBlocked": False,
            "isVerified": False,
            "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)
        }
        document.update(fields)
        users_collection.insert_one(document)
        return document
    return _make_user


@pytest.fixture
def auth_headers(app):
    """Build bearer headers for an email."""
    def _auth_headers(email, **claims):
        token = app.auth_service.issue_token({"email": email, **claims})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def citizen(make_user, auth_headers):
    make_user("citizen@example.com", role="citizen")
    return auth_headers("citizen@example.com")


@pytest.fixture
def staff(make_user, auth_headers):
    make_user("staff@example.com", role="staff", name="Sam Staff")
    return auth_headers("staff@example.com")


@pytest.fixture
def admin(make_user, auth_headers):
    make_user("admin@example.com", role="admin")
    return auth_headers("admin@example.com")


@pytest.fixture
def sample_issue_data():
    """Sample issue payload for testing."""
    return {
        "title": "Broken streetlight on Main Road",
        "category": "Streetlight",
        "location": "Main Road, Block C",
        "description": "The streetlight has been off for a week",
        "image": "https://img.example.com/light.jpg",
        "reporterEmail": "citizen@example.com",
        "reporterName": "Citizen"
    }


@pytest.fixture
def create_issue(client, citizen, sample_issue_data):
    """Create an issue through the API and return its id."""
    def _create_issue(**overrides):
        payload = dict(sample_issue_data)
        payload.update(overrides)
        response = client.post('/issues', json=payload, headers=citizen)
        assert response.status_code == 200
        return response.get_json()["insertedId"]
    return _create_issue
