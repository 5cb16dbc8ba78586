from unittest.mock import patch

REGISTRATION = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "password": "s3cret-pass",
}


def _register_and_verify(client, mailer, payload=REGISTRATION):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 200
    response = client.post(
        "/api/auth/verify-otp",
        json={"email": payload["email"], "otp": mailer.last_otp(payload["email"])},
    )
    assert response.status_code == 200
    return response.json()["token"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_register_sends_otp_without_returning_it(client, mailer):
    response = client.post("/api/auth/register", json=REGISTRATION)

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "OTP Sent Successfully!"}
    otp = mailer.last_otp("ada@example.com")
    assert otp not in response.text


def test_signup_flow_issues_session_token(client, mailer):
    token = _register_and_verify(client, mailer)

    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["email"] == "ada@example.com"
    assert body["data"]["firstName"] == "Ada"
    assert body["data"]["verified"] is True


def test_signup_flow_rejects_expired_otp(client, mailer, clock):
    client.post("/api/auth/register", json=REGISTRATION)
    clock.advance(minutes=11)

    response = client.post(
        "/api/auth/verify-otp",
        json={"email": "ada@example.com", "otp": mailer.last_otp("ada@example.com")},
    )

    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": "Email is Invalid or OTP Expired"}


def test_register_verified_email_conflicts_without_sending_otp(client, mailer):
    _register_and_verify(client, mailer)
    sent = len(mailer.otps)

    response = client.post("/api/auth/register", json={**REGISTRATION, "firstName": "Mallory"})

    assert response.status_code == 409
    assert response.json()["status"] == "error"
    assert len(mailer.otps) == sent


def test_register_validation_errors_use_envelope(client):
    response = client.post("/api/auth/register", json={"email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["message"]


def test_send_otp_resends_to_pending_account(client, mailer):
    client.post("/api/auth/register", json=REGISTRATION)

    response = client.post("/api/auth/send-otp", json={"email": "ada@example.com"})

    assert response.status_code == 200
    assert len(mailer.otps) == 2


def test_send_otp_unknown_email(client):
    response = client.post("/api/auth/send-otp", json={"email": "nobody@example.com"})

    assert response.status_code == 400


def test_login_requires_both_fields(client):
    response = client.post("/api/auth/login", json={"email": "ada@example.com"})

    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": "Both email and password are required"}


def test_login_success_and_failure(client, mailer):
    _register_and_verify(client, mailer)

    ok = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "s3cret-pass"})
    bad = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})

    assert ok.status_code == 200
    assert ok.json()["message"] == "Logged in successfully"
    assert ok.json()["token"]
    assert bad.status_code == 400
    assert bad.json() == {"status": "error", "message": "Email or Password is incorrect"}
    assert "token" not in bad.json()


def test_protected_route_requires_token(client):
    response = client.get("/api/users/me")

    assert response.status_code == 401
    assert response.json()["message"] == "You are not logged In! Please log in to get access"


def test_protected_route_rejects_invalid_token(client):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_protected_route_accepts_cookie(client, mailer):
    token = _register_and_verify(client, mailer)

    response = client.get("/api/users/me", headers={"Cookie": f"jwt={token}"})

    assert response.status_code == 200


def test_password_reset_flow(client, mailer, clock):
    old_token = _register_and_verify(client, mailer)
    clock.advance(minutes=5)

    response = client.post("/api/auth/forgot-password", json={"email": "ada@example.com"})
    assert response.status_code == 200
    assert response.json()["message"] == "Reset Password link sent to Email"
    reset_token = mailer.last_reset_token("ada@example.com")

    payload = {"password": "n3w-pass", "passwordConfirm": "n3w-pass"}
    response = client.post(f"/api/auth/reset-password/{reset_token}", json=payload)
    assert response.status_code == 200
    new_token = response.json()["token"]

    stale = client.get("/api/users/me", headers={"Authorization": f"Bearer {old_token}"})
    fresh = client.get("/api/users/me", headers={"Authorization": f"Bearer {new_token}"})
    assert stale.status_code == 401
    assert stale.json()["message"] == "User recently updated password! Please log in again"
    assert fresh.status_code == 200

    replay = client.post(f"/api/auth/reset-password/{reset_token}", json=payload)
    assert replay.status_code == 400
    assert replay.json()["message"] == "Token is Invalid or Expired"


def test_reset_password_mismatch(client):
    response = client.post(
        "/api/auth/reset-password/abc",
        json={"password": "n3w-pass", "passwordConfirm": "other"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Passwords do not match"


def test_forgot_password_unknown_email(client):
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 400
    assert response.json()["status"] == "error"


def test_forgot_password_smtp_failure_returns_500(client, mailer):
    _register_and_verify(client, mailer)

    with patch.object(mailer, "_send_email", return_value=False):
        response = client.post("/api/auth/forgot-password", json={"email": "ada@example.com"})

    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "message": "There was an error sending the email, Please try again later.",
    }


def test_register_verified_email_with_overlong_password_conflicts(client, mailer):
    _register_and_verify(client, mailer)

    response = client.post("/api/auth/register", json={**REGISTRATION, "password": "x" * 73})

    assert response.status_code == 409
    assert response.json() == {"status": "error", "message": "Email is already in use, Please login."}
