"""
HTTP Surface Tests
==================
send-otp / verify-otp routes, error mapping, health and middleware.
"""

import pytest
from fastapi.testclient import TestClient

from mailverify_core.app import create_app
from mailverify_core.config import Settings
from mailverify_core.store import InMemoryStore, NullStore

from .conftest import FakeClock, RecordingSender, ScriptedRandom

SEND = "/email/api/send-otp"
VERIFY = "/email/api/verify-otp"


def make_client(store=None, sender=None, rng=None, **settings):
    app = create_app(
        Settings(**settings),
        store=store if store is not None else InMemoryStore(clock=FakeClock()),
        sender=sender,
        rng=rng,
        configure_logging=False,
    )
    return TestClient(app)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def client(sender):
    with make_client(sender=sender, rng=ScriptedRandom(123456, 654321)) as c:
        yield c


class TestSendOtp:

    def test_send_success(self, client, sender):
        """Should send the code and answer with the provider receipt."""
        response = client.post(SEND, json={"email": "a@b.com"})

        assert response.status_code == 200
        assert response.json() == {
            "message": "OTP sent",
            "data": {"provider": "recording", "id": "msg-1"},
        }
        assert sender.sent == [("a@b.com", "123456", 600)]

    def test_code_not_echoed(self, client):
        """Should never return the code in the response."""
        response = client.post(SEND, json={"email": "a@b.com"})
        assert "123456" not in response.text

    def test_missing_email(self, client):
        """Should answer 400 when the address is missing."""
        response = client.post(SEND, json={})

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_malformed_email(self, client):
        """Should answer 400 for a malformed address."""
        response = client.post(SEND, json={"email": "nope"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid email format", "code": "validation_error"}

    def test_non_json_body(self, client):
        """Should answer 400 for a body that is not JSON."""
        response = client.post(SEND, content="email=a@b.com", headers={"Content-Type": "text/plain"})

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_cooldown(self, client):
        """Should answer 429 with Retry-After inside the cooldown."""
        client.post(SEND, json={"email": "a@b.com"})
        response = client.post(SEND, json={"email": "a@b.com"})

        assert response.status_code == 429
        assert response.json()["code"] == "throttled"
        assert response.headers["Retry-After"] == "60"

    def test_sender_not_configured(self):
        """Should answer 500 when no sender is configured."""
        with make_client(sender=None) as client:
            response = client.post(SEND, json={"email": "a@b.com"})

        assert response.status_code == 500
        assert response.json()["code"] == "sender_not_configured"

    def test_delivery_failure(self, client, sender):
        """Should answer 500 without leaking provider details when delivery fails."""
        sender.fail = True
        response = client.post(SEND, json={"email": "a@b.com"})

        assert response.status_code == 500
        assert response.json()["code"] == "delivery_failed"
        assert "mailbox" not in response.text


class TestVerifyOtp:

    def test_round_trip(self, client):
        """Should verify the issued code."""
        client.post(SEND, json={"email": "a@b.com"})
        response = client.post(VERIFY, json={"email": "a@b.com", "code": "123456"})

        assert response.status_code == 200
        assert response.json() == {"message": "Email verified"}

    def test_numeric_code_accepted(self, client):
        """Should accept a code sent as a JSON number."""
        client.post(SEND, json={"email": "a@b.com"})
        response = client.post(VERIFY, json={"email": "a@b.com", "code": 123456})

        assert response.status_code == 200

    def test_marks_gate(self, client):
        """Should make the gate report the address as verified."""
        gate = client.app.state.gate
        client.post(SEND, json={"email": "a@b.com"})
        client.post(VERIFY, json={"email": "a@b.com", "code": "123456"})

        assert client.portal.call(gate.is_verified, "a@b.com") is True

    @pytest.mark.parametrize("body", [{}, {"email": "a@b.com"}, {"code": "123456"}])
    def test_missing_fields(self, client, body):
        """Should answer 400 when the address or code is missing."""
        response = client.post(VERIFY, json=body)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_no_pending_code(self, client):
        """Should answer 400 without exposing store keys when nothing is pending."""
        response = client.post(VERIFY, json={"email": "a@b.com", "code": "123456"})

        assert response.status_code == 400
        assert response.json()["code"] == "no_pending_code"
        assert "otp:" not in response.text

    def test_wrong_code(self, client):
        """Should answer 400 for a wrong code."""
        client.post(SEND, json={"email": "a@b.com"})
        response = client.post(VERIFY, json={"email": "a@b.com", "code": "000000"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid OTP", "code": "invalid_code"}

    def test_attempts_exceeded(self, client):
        """Should answer 429 once the attempt budget is spent."""
        client.post(SEND, json={"email": "a@b.com"})
        for _ in range(5):
            client.post(VERIFY, json={"email": "a@b.com", "code": "000000"})

        response = client.post(VERIFY, json={"email": "a@b.com", "code": "123456"})

        assert response.status_code == 429
        assert response.json()["code"] == "too_many_attempts"

    def test_store_unavailable(self, sender):
        """Should answer 500 when verification has no store."""
        with make_client(store=NullStore(), sender=sender) as client:
            client.post(SEND, json={"email": "a@b.com"})
            response = client.post(VERIFY, json={"email": "a@b.com", "code": "123456"})

        assert response.status_code == 500
        assert response.json()["code"] == "service_unavailable"


class TestServiceSurface:

    def test_root(self, client):
        """Should answer on the root path."""
        response = client.get("/")
        assert response.status_code == 200

    def test_custom_prefix(self, sender):
        """Should mount the routes under the configured prefix."""
        with make_client(sender=sender, api_prefix="") as client:
            response = client.post("/send-otp", json={"email": "a@b.com"})
        assert response.status_code == 200

    def test_health_healthy(self, client):
        """Should report healthy with a live store and sender."""
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["components"]["store"]["status"] == "connected"
        assert body["components"]["sender"]["status"] == "configured"

    def test_health_degraded_without_store(self, sender):
        """Should report degraded but stay ready on the null store."""
        with make_client(store=NullStore(), sender=sender) as client:
            body = client.get("/health").json()
            ready = client.get("/health/ready")

        assert body["status"] == "degraded"
        assert body["components"]["store"]["status"] == "degraded"
        assert ready.status_code == 200

    def test_liveness(self, client):
        """Should report the process alive."""
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_security_and_request_id_headers(self, client):
        """Should add security headers and echo the request id."""
        response = client.get("/", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Request-ID"] == "req-42"

    def test_cors_preflight(self, client):
        """Should answer CORS preflight for an allowed origin."""
        response = client.options(
            SEND,
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
