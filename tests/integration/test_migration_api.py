"""
HTTP tests for the legacy data migration endpoints.
"""

from unittest.mock import AsyncMock, patch

import pytest

from subtrack.application.interfaces.exceptions import RepositoryError
from subtrack.infrastructure.repositories.subscription_repository import (
    SqlAlchemySubscriptionRepository,
)

pytestmark = pytest.mark.integration

LEGACY_DATA = {
    "subscriptions": [
        {"name": "Netflix", "amount": 15.99, "paymentDate": 15, "category": "video"},
        {"name": "", "amount": 5, "paymentDate": 3},
    ],
    "budget": 120,
    "settings": {"darkMode": True, "language": "en"},
}


@pytest.fixture
def headers(api_user) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_user['accessToken']}"}


class TestMigrateEndpoint:
    def test_requires_authentication(self, client):
        response = client.post("/migration", json=LEGACY_DATA)

        assert response.status_code == 401

    def test_migrate(self, client, headers):
        response = client.post("/migration", json=LEGACY_DATA, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Migration completed successfully. 3 items migrated."
        details = body["data"]["details"]
        assert details["subscriptions"]["migrated"] == 1
        assert details["subscriptions"]["failed"] == 1
        assert details["subscriptions"]["errors"] == [
            'Failed to migrate subscription "unknown": Name is required'
        ]
        assert details["budget"] == {"migrated": 1}
        assert details["settings"] == {"migrated": 1}

    def test_empty_body(self, client, headers):
        response = client.post("/migration", json={}, headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["details"]["subscriptions"]["migrated"] == 0

    def test_malformed_settings_keep_the_batch(self, client, headers):
        payload = {
            "subscriptions": [LEGACY_DATA["subscriptions"][0]],
            "settings": {"language": ["en"], "darkMode": True},
        }

        response = client.post("/migration", json=payload, headers=headers)

        assert response.status_code == 200
        details = response.json()["data"]["details"]
        assert details["subscriptions"]["migrated"] == 1
        assert details["settings"] == {"migrated": 1}
        profile = client.get("/auth/profile", headers=headers).json()["data"]["user"]
        assert profile["language"] == "es"
        assert profile["settings"]["darkMode"] is True

    def test_persistence_failure_is_500(self, client, headers):
        with patch.object(
            SqlAlchemySubscriptionRepository,
            "add_many",
            AsyncMock(side_effect=RepositoryError("disk full")),
        ):
            response = client.post("/migration", json=LEGACY_DATA, headers=headers)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Migration failed"
        assert body["error"] == "Failed to persist migrated data"
        assert "disk full" not in response.text

        status = client.get("/migration/status", headers=headers).json()["data"]
        assert status["hasMigrated"] is False
        assert status["subscriptionCount"] == 0
        assert status["budgetCount"] == 0


class TestStatusEndpoints:
    def test_status_before_and_after(self, client, headers):
        before = client.get("/migration/status", headers=headers).json()["data"]
        assert before == {
            "hasMigrated": False,
            "subscriptionCount": 0,
            "budgetCount": 0,
            "migratedAt": None,
        }

        client.post("/migration", json=LEGACY_DATA, headers=headers)

        after = client.get("/migration/status", headers=headers).json()["data"]
        assert after["hasMigrated"] is True
        assert after["subscriptionCount"] == 1
        assert after["budgetCount"] == 1
        assert after["migratedAt"]

    def test_clear_flag(self, client, headers):
        client.post("/migration", json=LEGACY_DATA, headers=headers)

        response = client.delete("/migration/flag", headers=headers)
        assert response.status_code == 200

        status = client.get("/migration/status", headers=headers).json()["data"]
        assert status["hasMigrated"] is False
        profile = client.get("/auth/profile", headers=headers).json()["data"]["user"]
        assert profile["settings"]["darkMode"] is True
