from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from tawk.application.services.auth_service import AuthService
from tawk.core.app_factory import create_application
from tawk.core.config import Settings
from tawk.infrastructure.persistence.sqlite import SQLiteUserStore
from tawk.services.email_service import EmailService


class FakeClock:
    """Mutable clock; starts an hour in the past so issued tokens are never "from the future"."""

    def __init__(self) -> None:
        self.now = datetime.now(tz=timezone.utc).replace(microsecond=0) - timedelta(hours=1)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailService(EmailService):
    """Email service that keeps every message in memory instead of talking to SMTP."""

    def __init__(self) -> None:
        super().__init__(smtp_host="smtp.test", smtp_username="tawk", from_email="no-reply@tawk.test")
        self.fail = False
        self.messages: List[Tuple[str, str]] = []
        self.otps: List[Tuple[str, str]] = []
        self.reset_urls: List[Tuple[str, str]] = []

    def send_otp_email(self, to_email, first_name, otp, expires_minutes):
        self.otps.append((to_email, otp))
        return super().send_otp_email(to_email, first_name, otp, expires_minutes)

    def send_password_reset_email(self, to_email, reset_url, expires_minutes):
        self.reset_urls.append((to_email, reset_url))
        return super().send_password_reset_email(to_email, reset_url, expires_minutes)

    def _send_email(self, to_email, subject, html_body, text_body):
        self.messages.append((to_email, subject))
        return not self.fail

    def last_otp(self, email: str) -> str:
        return [otp for to, otp in self.otps if to == email][-1]

    def last_reset_token(self, email: str) -> str:
        url = [url for to, url in self.reset_urls if to == email][-1]
        return url.split("code=", 1)[1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mailer():
    return RecordingEmailService()


@pytest.fixture
def store(tmp_path):
    repository = SQLiteUserStore(tmp_path / "tawk.db")
    yield repository
    repository.close()


@pytest.fixture
def auth_service(store, mailer, clock):
    return AuthService(
        repository=store,
        email_service=mailer,
        secret_key="test-secret",
        frontend_base_url="https://tawk.test",
        clock=clock,
    )


@pytest.fixture
def client(tmp_path, monkeypatch, mailer, clock):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("FRONTEND_BASE_URL", "https://tawk.test")
    app = create_application(Settings(), email_service=mailer)
    with TestClient(app) as test_client:
        container = app.state.container
        container.auth_service = AuthService(
            repository=container.repository,
            email_service=mailer,
            secret_key="test-secret",
            frontend_base_url="https://tawk.test",
            clock=clock,
        )
        yield test_client
