"""Tests for the check-expiry HTTP endpoint."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from expiry_reminder.config import Settings
from expiry_reminder.core.expiry_rules import local_today
from expiry_reminder.runner import Ports
from expiry_reminder.web.app import CORS_HEADERS, create_app


@pytest.fixture
def email_sender():
    sender = AsyncMock()
    sender.send_email = AsyncMock(return_value={"id": "email-1"})
    return sender


@pytest.fixture
def client_for(settings, make_directory, email_sender):
    def _build(assets=None, fail_on=None):
        directory = make_directory(
            assets or [],
            [{"id": "u1", "email": "a@b.com"}],
            [{"id": "u1", "notify_days": [30, 7, 1]}],
            fail_on=fail_on,
        )
        ports = Ports(directory=directory, email_sender=email_sender, chat_sender=None)
        return TestClient(create_app(settings, ports=ports))

    return _build


def _due_in(days):
    expiry = local_today("Asia/Shanghai") + timedelta(days=days)
    return {"id": "a1", "user_id": "u1", "name": "CA 证书", "expiry_date": expiry.isoformat()}


class TestCheckExpiryEndpoint:
    def test_preflight_returns_ok_with_cors(self, client_for, email_sender):
        client = client_for([_due_in(7)])

        response = client.options("/check-expiry")

        assert response.status_code == 200
        assert response.text == "ok"
        assert response.headers["access-control-allow-origin"] == "*"
        email_sender.send_email.assert_not_called()

    def test_post_runs_check(self, client_for, email_sender):
        client = client_for([_due_in(7)])

        response = client.post("/check-expiry", json={"ignored": True})

        assert response.status_code == 200
        body = response.json()
        assert body["sent"] == 1
        assert body["details"][0]["recipient"] == "a@b.com"
        assert body["skipped"] == []
        assert any("Fetched 1 assets" in line for line in body["logs"])
        assert response.headers["access-control-allow-headers"] == CORS_HEADERS[
            "Access-Control-Allow-Headers"
        ]

    def test_get_on_root_also_runs(self, client_for):
        client = client_for([_due_in(15)])

        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["sent"] == 0

    def test_load_failure_returns_400(self, client_for, email_sender):
        client = client_for(fail_on="assets")

        response = client.post("/check-expiry")

        assert response.status_code == 400
        body = response.json()
        assert "assets table unavailable" in body["error"]
        assert set(body) == {"error", "logs"}
        email_sender.send_email.assert_not_called()

    def test_adapter_build_failure_returns_400(self):
        settings = Settings(DIRECTORY_PROVIDER="supabase", SUPABASE_URL="", SUPABASE_SERVICE_ROLE_KEY="")
        client = TestClient(create_app(settings))

        response = client.post("/check-expiry")

        assert response.status_code == 400
        assert "SUPABASE_URL" in response.json()["error"]
        assert response.json()["logs"] == []
