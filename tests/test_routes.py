"""HTTP-level tests against the FastAPI app with an in-memory store."""

import pytest
from fastapi.testclient import TestClient

import controllers.case_controller
import controllers.message_controller
from config import Settings
from dal.kv_store import InMemoryKeyValueStore
from main import configure_services, create_app

from conftest import ScriptedAnalyzer


@pytest.fixture
def analyzer():
    return ScriptedAnalyzer()


@pytest.fixture
def app(analyzer):
    app = create_app()
    settings = Settings(account_latency_seconds=0, max_image_bytes=10_000)
    configure_services(app, InMemoryKeyValueStore(), settings, analyzer)
    return app


@pytest.fixture
def client(app):
    # No context manager: the lifespan (SQLite + OpenAI client) is not started.
    return TestClient(app)


def _register(client, email="a@x.com", role="patient", name="Ada"):
    resp = client.post("/auth/register", json={"name": name, "email": email, "password": "pw", "role": role})
    assert resp.status_code == 200, resp.text
    return resp.json()


def _analyze(client, png_bytes, count=1, notes="itchy"):
    files = [("images", (f"img{i}.png", png_bytes, "image/png")) for i in range(count)]
    return client.post("/analysis", files=files, data={"notes": notes})


class TestAuthRoutes:
    def test_register_login_me_logout(self, client):
        user = _register(client)
        assert user == {"name": "Ada", "email": "a@x.com", "role": "patient"}

        assert client.post("/auth/login", json={"email": "a@x.com", "password": "pw"}).status_code == 200
        assert client.get("/auth/me").json()["email"] == "a@x.com"

        client.post("/auth/logout")
        assert client.get("/auth/me").status_code == 401

    def test_duplicate_registration(self, client):
        _register(client)
        resp = client.post("/auth/register", json={"name": "B", "email": "A@x.com", "password": "pw", "role": "doctor"})
        assert resp.status_code == 400
        assert "already exists" in resp.json()["detail"]

    def test_bad_login(self, client):
        _register(client)
        assert client.post("/auth/login", json={"email": "a@x.com", "password": "no"}).status_code == 401

    def test_profile_update(self, client):
        _register(client)
        resp = client.put("/auth/profile", json={"name": "Ada L", "email": "ada@x.com"})
        assert resp.status_code == 200
        assert client.get("/auth/me").json()["email"] == "ada@x.com"

    def test_password_reset_does_not_echo_code(self, client, app):
        _register(client)
        resp = client.post("/auth/password-reset/request", json={"email": "a@x.com", "role": "patient"})
        assert resp.json() == {"requested": True}
        resp = client.post(
            "/auth/password-reset/confirm", json={"email": "a@x.com", "code": "bad", "new_password": "x"}
        )
        assert resp.status_code == 401

    def test_password_reset_unknown_account(self, client):
        resp = client.post("/auth/password-reset/request", json={"email": "ghost@x.com", "role": "patient"})
        assert resp.status_code == 404


class TestAnalysisRoutes:
    def test_requires_login(self, client, png_bytes):
        assert _analyze(client, png_bytes).status_code == 401

    def test_batch_persists_patient_cases(self, client, png_bytes, analyzer):
        _register(client)
        resp = _analyze(client, png_bytes, count=2)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["state"] == "completed"
        assert len(body["results"]) == 2
        assert body["results"][0]["imagePreviewUrl"].startswith("data:image/png;base64,")
        assert [c["patient_name"] for c in analyzer.calls] == ["Ada (Image 1/2)", "Ada (Image 2/2)"]

        assert len(client.get("/cases").json()) == 2

    def test_failure_reports_image_and_keeps_earlier_cases(self, client, png_bytes, analyzer):
        analyzer.fail_on = {2}
        _register(client)
        resp = _analyze(client, png_bytes, count=3)
        assert resp.status_code == 502
        detail = resp.json()["detail"]
        assert detail["failed_image"] == 2
        assert detail["completed"] == 1
        assert "image 2" in detail["message"]
        assert len(client.get("/cases").json()) == 1

    def test_oversized_upload_rejected(self, client, analyzer):
        _register(client)
        files = [("images", ("big.png", b"x" * 10_001, "image/png"))]
        resp = client.post("/analysis", files=files)
        assert resp.status_code == 400
        assert "big.png" in resp.json()["detail"]
        assert analyzer.calls == []

    def test_non_image_rejected(self, client):
        _register(client)
        resp = client.post("/analysis", files=[("images", ("notes.txt", b"hello", "text/plain"))])
        assert resp.status_code == 415


class TestCaseRoutes:
    def _case_id(self, client, png_bytes):
        _analyze(client, png_bytes)
        return client.get("/cases").json()[0]["doctor_dashboard"]["case_id"]

    def test_doctor_sees_all_and_double_toggle(self, client, png_bytes):
        _register(client)
        case_id = self._case_id(client, png_bytes)
        _register(client, email="doc@x.com", role="doctor", name="Doc")

        original = client.get(f"/cases/{case_id}").json()
        assert client.post(f"/cases/{case_id}/flag").json()["isManuallyFlagged"] is True
        assert client.get("/cases", params={"flagged": True}).json()[0]["doctor_dashboard"]["case_id"] == case_id
        client.post(f"/cases/{case_id}/flag")
        assert client.get(f"/cases/{case_id}").json() == original

    def test_conditions(self, client, png_bytes):
        _register(client)
        _analyze(client, png_bytes)
        assert client.get("/cases/conditions").json() == ["Psoriasis"]

    def test_unknown_case(self, client):
        _register(client, role="doctor")
        assert client.get("/cases/ghost").status_code == 404

    def test_bad_sort(self, client):
        _register(client, role="doctor")
        assert client.get("/cases", params={"sort": "random"}).status_code == 400

    def test_other_patient_is_denied(self, client, png_bytes):
        _register(client)
        case_id = self._case_id(client, png_bytes)
        _register(client, email="b@x.com", name="Bob")

        assert client.get("/cases").json() == []
        assert client.get(f"/cases/{case_id}").status_code == 403
        assert client.get(f"/cases/{case_id}/messages").status_code == 403
        assert client.post(f"/cases/{case_id}/flag").status_code == 403

    @pytest.mark.parametrize(
        "module, name, path",
        [
            ("case_controller", "list_conditions", "/cases/conditions"),
            ("case_controller", "get_case", "/cases/c1"),
            ("message_controller", "list_messages", "/cases/c1/messages"),
        ],
    )
    def test_unexpected_errors_become_500(self, client, monkeypatch, module, name, path):
        async def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(getattr(controllers, module), name, boom)
        _register(client, role="doctor")

        resp = client.get(path)
        assert resp.status_code == 500
        assert resp.json()["detail"] == "boom"


class TestMessageRoutes:
    def test_thread_between_patient_and_doctor(self, client, png_bytes):
        _register(client)
        case_id = TestCaseRoutes()._case_id(client, png_bytes)
        assert client.get(f"/cases/{case_id}/messages").json() == []

        client.post(f"/cases/{case_id}/messages", json={"text": "Is this serious?"})
        _register(client, email="doc@x.com", role="doctor", name="Doc")
        thread = client.post(f"/cases/{case_id}/messages", json={"text": "Please book a visit."}).json()

        assert [(m["sender"], m["text"]) for m in thread] == [
            ("patient", "Is this serious?"),
            ("doctor", "Please book a visit."),
        ]

    def test_blank_message_rejected(self, client, png_bytes):
        _register(client)
        case_id = TestCaseRoutes()._case_id(client, png_bytes)
        assert client.post(f"/cases/{case_id}/messages", json={"text": "   "}).status_code == 400

    def test_websocket_pushes_new_messages(self, client, png_bytes):
        _register(client)
        case_id = TestCaseRoutes()._case_id(client, png_bytes)

        with client.websocket_connect(f"/ws/cases/{case_id}/messages") as ws:
            assert ws.receive_json() == {"type": "messages", "messages": []}
            ws.send_json({"type": "message.send", "text": "hello"})
            pushed = ws.receive_json()
            assert [m["text"] for m in pushed["messages"]] == ["hello"]

        assert [m["text"] for m in client.get(f"/cases/{case_id}/messages").json()] == ["hello"]

    def test_websocket_requires_login(self, client):
        with client.websocket_connect("/ws/cases/any/messages") as ws:
            assert ws.receive_json()["type"] == "error"


def test_health(client):
    assert client.get("/health").json() == {"ok": True, "store_initialized": True, "analyzer_available": True}
