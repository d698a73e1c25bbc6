from datetime import datetime, timedelta, timezone

from app.api.routes import auth as auth_module
from app.models.password_reset import PasswordResetCode
from app.models.user import User
from app.services import otp as otp_service
from app.services.email import EmailDeliveryError
from conftest import DEFAULT_PASSWORD, last_code, login_with_otp, register_user


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def _request_reset(client, email="driver@example.com"):
    response = client.post("/api/auth/forgot-password", json={"email": email})
    assert response.status_code == 200, response.text
    return response


def _reset(client, code, email="driver@example.com", new_password="newpassword123"):
    return client.post(
        "/api/auth/reset-password",
        json={"email": email, "code": code, "newPassword": new_password},
    )


def test_forgot_password_response_does_not_reveal_accounts(client, session_factory, outbox):
    register_user(client)
    with session_factory() as db:
        db.add(User(email="google@example.com", firebase_uid="google-subject", name="Google User", app_version="P"))
        db.commit()

    existing = _request_reset(client, "driver@example.com")
    unknown = _request_reset(client, "nobody@example.com")
    oauth = _request_reset(client, "google@example.com")

    assert existing.content == unknown.content == oauth.content
    assert existing.json()["message"] == "If the email exists, you will receive a recovery code"
    assert [mail["to"] for mail in outbox] == ["driver@example.com"]

    with session_factory() as db:
        assert db.get(PasswordResetCode, "nobody@example.com") is None
        assert db.get(PasswordResetCode, "google@example.com") is None


def test_password_reset_flow(client, outbox):
    register_user(client)
    _request_reset(client, "Driver@Example.com")
    code = last_code(outbox)

    check = client.get("/api/auth/reset-password", params={"email": "driver@example.com", "code": code})
    assert check.status_code == 200
    status = check.json()
    assert status["valid"] is True
    assert status["message"] == "Code is valid"
    assert 0 < status["expiresIn"] <= 15 * 60

    response = _reset(client, code)
    assert response.status_code == 200
    assert response.json()["message"] == "Password updated successfully"

    old_login = client.post("/api/auth/login", json={"email": "driver@example.com", "password": DEFAULT_PASSWORD})
    assert old_login.status_code == 401

    assert login_with_otp(client, outbox, password="newpassword123")["token"]


def test_reset_code_is_single_use(client, outbox):
    register_user(client)
    _request_reset(client)
    code = last_code(outbox)

    assert _reset(client, code).status_code == 200
    reused = _reset(client, code, new_password="anotherpass123")
    assert reused.status_code == 400
    assert reused.json()["code"] == "reset_code_invalid"


def test_wrong_code_keeps_entry(client, session_factory, outbox, monkeypatch):
    monkeypatch.setattr(otp_service, "generate_numeric_code", lambda digits=6: "135790")
    register_user(client)
    _request_reset(client)

    wrong = _reset(client, "000000")
    assert wrong.status_code == 400
    assert wrong.json()["code"] == "reset_code_mismatch"

    with session_factory() as db:
        assert db.get(PasswordResetCode, "driver@example.com") is not None

    assert _reset(client, "135790").status_code == 200


def test_expired_code_is_removed_on_reset(client, session_factory, outbox, monkeypatch):
    clock = FakeClock(datetime.now(timezone.utc))
    monkeypatch.setattr(otp_service, "utcnow", clock)
    register_user(client)
    _request_reset(client)
    code = last_code(outbox)

    clock.advance(minutes=15, seconds=1)
    expired = _reset(client, code)
    assert expired.status_code == 400
    assert expired.json()["code"] == "reset_code_expired"

    with session_factory() as db:
        assert db.get(PasswordResetCode, "driver@example.com") is None


def test_code_check_never_deletes_entry(client, session_factory, outbox, monkeypatch):
    clock = FakeClock(datetime.now(timezone.utc))
    monkeypatch.setattr(otp_service, "utcnow", clock)
    register_user(client)
    _request_reset(client)
    code = last_code(outbox)

    wrong = client.get("/api/auth/reset-password", params={"email": "driver@example.com", "code": "000000"})
    assert wrong.json() == {"valid": False, "message": "Incorrect code"}

    clock.advance(minutes=20)
    expired = client.get("/api/auth/reset-password", params={"email": "driver@example.com", "code": code})
    assert expired.status_code == 200
    assert expired.json() == {"valid": False, "message": "Code expired"}

    with session_factory() as db:
        assert db.get(PasswordResetCode, "driver@example.com") is not None

    missing = client.get("/api/auth/reset-password", params={"email": "nobody@example.com", "code": code})
    assert missing.json() == {"valid": False, "message": "Code not found"}


def test_code_check_requires_parameters(client):
    response = client.get("/api/auth/reset-password", params={"email": " ", "code": "123456"})
    assert response.status_code == 400

    missing = client.get("/api/auth/reset-password", params={"email": "driver@example.com"})
    assert missing.status_code == 400


def test_new_request_overwrites_previous_code(client, outbox, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(otp_service, "generate_numeric_code", lambda digits=6: next(codes))
    register_user(client)
    _request_reset(client)
    _request_reset(client)

    assert _reset(client, "111111").status_code == 400
    assert _reset(client, "222222").status_code == 200


def test_new_password_must_meet_minimum_length(client, outbox):
    register_user(client)
    _request_reset(client)
    response = _reset(client, last_code(outbox), new_password="123")
    assert response.status_code == 400
    fields = [item["field"] for item in response.json()["details"]["fields"]]
    assert "newPassword" in fields


def test_reset_rejected_once_account_linked_to_google(client, session_factory, outbox):
    register_user(client)
    _request_reset(client)
    code = last_code(outbox)

    with session_factory() as db:
        user = db.query(User).filter(User.email == "driver@example.com").one()
        user.firebase_uid = "google-subject"
        db.commit()

    response = _reset(client, code)
    assert response.status_code == 400
    assert response.json()["code"] == "wrong_login_method"


def test_wrong_codes_exhaust_reset_budget(client, session_factory, outbox, monkeypatch):
    monkeypatch.setattr(otp_service, "generate_numeric_code", lambda digits=6: "246802")
    register_user(client)
    _request_reset(client)

    for remaining in (4, 3, 2, 1):
        wrong = _reset(client, "000000")
        assert wrong.status_code == 400
        assert wrong.json()["details"]["remaining_attempts"] == remaining

    exhausted = _reset(client, "000000")
    assert exhausted.status_code == 429
    assert exhausted.json()["code"] == "reset_attempts_exceeded"

    with session_factory() as db:
        assert db.get(PasswordResetCode, "driver@example.com") is None

    late = _reset(client, "246802")
    assert late.status_code == 400
    assert late.json()["code"] == "reset_code_invalid"


def test_code_check_misses_draw_from_reset_budget(client, session_factory, outbox, monkeypatch):
    monkeypatch.setattr(otp_service, "generate_numeric_code", lambda digits=6: "246802")
    register_user(client)
    _request_reset(client)
    params = {"email": "driver@example.com", "code": "000000"}

    for _ in range(4):
        assert client.get("/api/auth/reset-password", params=params).json()["message"] == "Incorrect code"
    last = client.get("/api/auth/reset-password", params=params)
    assert last.json() == {"valid": False, "message": "Too many attempts"}

    right = client.get("/api/auth/reset-password", params={"email": "driver@example.com", "code": "246802"})
    assert right.json() == {"valid": False, "message": "Too many attempts"}

    blocked = _reset(client, "246802")
    assert blocked.status_code == 429
    with session_factory() as db:
        assert db.get(PasswordResetCode, "driver@example.com") is None


def test_new_request_restores_reset_budget(client, outbox, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr(otp_service, "generate_numeric_code", lambda digits=6: next(codes))
    register_user(client)
    _request_reset(client)
    for _ in range(4):
        _reset(client, "000000")

    _request_reset(client)
    wrong = _reset(client, "000000")
    assert wrong.json()["details"]["remaining_attempts"] == 4
    assert _reset(client, "222222").status_code == 200


def test_code_check_is_rate_limited(client, monkeypatch):
    monkeypatch.setattr(auth_module.settings, "auth_rate_limit_password_reset_max_requests", 3)
    params = {"email": "driver@example.com", "code": "123456"}

    for _ in range(3):
        assert client.get("/api/auth/reset-password", params=params).status_code == 200

    blocked = client.get("/api/auth/reset-password", params=params)
    assert blocked.status_code == 429
    assert blocked.json()["code"] == "rate_limited"
    assert "Retry-After" in blocked.headers

    # The GET and POST share one budget.
    post = _reset(client, "123456")
    assert post.status_code == 429


def test_spoofed_forwarded_for_does_not_reset_budget(client, monkeypatch):
    monkeypatch.setattr(auth_module.settings, "auth_rate_limit_password_reset_max_requests", 3)

    statuses = []
    for index in range(5):
        response = client.post(
            "/api/auth/reset-password",
            json={"email": "driver@example.com", "code": "123456", "newPassword": "newpassword123"},
            headers={"X-Forwarded-For": f"203.0.113.{index}"},
        )
        statuses.append(response.status_code)

    assert statuses == [400, 400, 400, 429, 429]


def test_identity_budget_spans_forwarded_addresses(client, monkeypatch):
    monkeypatch.setattr(auth_module.settings, "trust_forwarded_headers", True)
    monkeypatch.setattr(auth_module.settings, "auth_rate_limit_identity_max_requests", 4)

    statuses = []
    for index in range(6):
        response = client.get(
            "/api/auth/reset-password",
            params={"email": "Driver@Example.com", "code": f"{index:06d}"},
            headers={"X-Forwarded-For": f"198.51.100.{index}"},
        )
        statuses.append(response.status_code)

    assert statuses == [200, 200, 200, 200, 429, 429]


def test_delivery_failure_is_reported_for_local_accounts_only(client, session_factory, monkeypatch):
    register_user(client)

    def broken_send(**kwargs):
        raise EmailDeliveryError("SMTP connection failed")

    monkeypatch.setattr("app.services.email.send_email", broken_send)

    failed = client.post("/api/auth/forgot-password", json={"email": "driver@example.com"})
    assert failed.status_code == 503
    assert failed.json()["code"] == "delivery_failed"

    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})
    assert unknown.status_code == 200

    with session_factory() as db:
        assert db.get(PasswordResetCode, "driver@example.com") is not None
