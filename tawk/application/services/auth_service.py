from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from ...core.errors import (
    AuthenticationError,
    ConflictError,
    DeliveryError,
    NotAuthenticatedError,
    ValidationError,
)
from ...domain.models import RegistrationResult, UserAccount
from ...domain.ports.persistence import UserRepository
from ...services import credentials
from ...services.email_service import EmailService

logger = logging.getLogger(__name__)

# bcrypt ignores (or rejects) anything past this many bytes.
MAX_PASSWORD_BYTES = 72


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class AuthService:
    """Signup (register, send OTP, verify OTP), login, session checks and password reset."""

    def __init__(
        self,
        repository: UserRepository,
        email_service: EmailService,
        secret_key: str,
        algorithm: str = "HS256",
        token_exp_minutes: int = 0,
        otp_exp_minutes: int = 10,
        reset_exp_minutes: int = 10,
        frontend_base_url: str = "http://localhost:3000",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise RuntimeError("JWT_SECRET is not configured.")
        if secret_key == "change-me":
            logger.warning("JWT_SECRET is using the default value. Configure a real secret in production.")
        self._users = repository
        self._email = email_service
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._token_exp_minutes = token_exp_minutes
        self._otp_exp_minutes = otp_exp_minutes
        self._reset_exp_minutes = reset_exp_minutes
        self._frontend_base_url = frontend_base_url.rstrip("/")
        self._clock = clock

    # Signup -----------------------------------------------------------------
    def register(self, first_name: str, last_name: str, email: str, password: str) -> RegistrationResult:
        first = (first_name or "").strip()
        last = (last_name or "").strip()
        email_clean = (email or "").strip().lower()
        if not first or not last or not email_clean or not password:
            raise ValidationError("firstName, lastName, email and password are required")

        existing = self._users.find_by_email(email_clean)
        if existing and existing.verified:
            raise ConflictError("Email is already in use, Please login.")
        self._check_password(password)

        password_hash = credentials.hash_secret(password)
        if existing:
            user = self._users.update_user(
                existing.id,
                first_name=first,
                last_name=last,
                password_hash=password_hash,
            )
            logger.info("Updated pending registration for user %s", user.id)
            return RegistrationResult(user_id=user.id, email=user.email, created=False)

        user = self._users.create_user(
            first_name=first,
            last_name=last,
            email=email_clean,
            password_hash=password_hash,
        )
        logger.info("Created unverified user %s", user.id)
        return RegistrationResult(user_id=user.id, email=user.email, created=True)

    def send_otp(self, registration: RegistrationResult) -> None:
        user = self._users.find_by_id(registration.user_id)
        if not user:
            raise AuthenticationError("The user doesn't exist")
        self._issue_otp(user)

    def resend_otp(self, email: str) -> None:
        email_clean = (email or "").strip().lower()
        if not email_clean:
            raise ValidationError("Email is required")
        user = self._users.find_by_email(email_clean)
        if not user or user.verified:
            raise AuthenticationError("There is no pending registration for this email")
        self._issue_otp(user)

    def verify_otp(self, email: str, otp: str) -> str:
        email_clean = (email or "").strip().lower()
        if not email_clean or not otp:
            raise ValidationError("Both email and otp are required")

        user = self._users.find_with_active_otp(email_clean, self._clock())
        if not user or not user.otp_hash:
            raise AuthenticationError("Email is Invalid or OTP Expired")
        if not credentials.verify_secret(str(otp).strip(), user.otp_hash):
            logger.info("Incorrect OTP submitted for user %s", user.id)
            raise AuthenticationError("OTP is incorrect")

        user = self._users.update_user(user.id, verified=True, otp_hash=None, otp_expires_at=None)
        logger.info("User %s verified", user.id)
        return self.issue_token(user)

    # Login & sessions ------------------------------------------------------
    def login(self, email: Optional[str], password: Optional[str]) -> str:
        if not email or not password:
            raise ValidationError("Both email and password are required")
        user = self._users.find_by_email(email.strip().lower())
        if not user or not credentials.verify_secret(password, user.password_hash):
            raise AuthenticationError("Email or Password is incorrect")
        if not user.verified:
            raise AuthenticationError("Please verify your email before logging in.")
        logger.info("User %s logged in", user.id)
        return self.issue_token(user)

    def issue_token(self, user: UserAccount) -> str:
        now = self._clock()
        payload: Dict[str, Any] = {"sub": str(user.id), "iat": now.timestamp()}
        if self._token_exp_minutes > 0:
            payload["exp"] = now + timedelta(minutes=self._token_exp_minutes)
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def authenticate_token(self, token: Optional[str]) -> UserAccount:
        if not token:
            raise NotAuthenticatedError("You are not logged In! Please log in to get access")
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat"]},
            )
        except jwt.InvalidTokenError as exc:
            raise NotAuthenticatedError("Invalid or expired token") from exc
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise NotAuthenticatedError("Invalid or expired token") from exc

        user = self._users.find_by_id(user_id)
        if not user:
            raise NotAuthenticatedError("The user doesn't exist")
        if user.changed_password_after(float(payload["iat"])):
            raise NotAuthenticatedError("User recently updated password! Please log in again")
        return user

    # Password reset --------------------------------------------------------
    def forgot_password(self, email: str) -> None:
        email_clean = (email or "").strip().lower()
        if not email_clean:
            raise ValidationError("Email is required")
        user = self._users.find_by_email(email_clean)
        if not user:
            raise AuthenticationError("There is no user with given email address")

        reset_token = credentials.generate_reset_token()
        self._users.update_user(
            user.id,
            password_reset_token_hash=credentials.hash_reset_token(reset_token),
            password_reset_expires_at=self._clock() + timedelta(minutes=self._reset_exp_minutes),
        )
        reset_url = f"{self._frontend_base_url}/auth/reset-password?code={reset_token}"
        if not self._email.send_password_reset_email(user.email, reset_url, self._reset_exp_minutes):
            self._users.update_user(
                user.id,
                password_reset_token_hash=None,
                password_reset_expires_at=None,
            )
            raise DeliveryError("There was an error sending the email, Please try again later.")
        logger.info("Password reset requested for user %s", user.id)

    def reset_password(self, token: str, password: Optional[str], password_confirm: Optional[str]) -> str:
        if not password or not password_confirm:
            raise ValidationError("Both password and passwordConfirm are required")
        if password != password_confirm:
            raise ValidationError("Passwords do not match")
        self._check_password(password)

        now = self._clock()
        user = self._users.find_by_reset_token(credentials.hash_reset_token(token or ""), now)
        if not user:
            raise AuthenticationError("Token is Invalid or Expired")

        # The emailed link proves control of the mailbox, same as an OTP.
        user = self._users.update_user(
            user.id,
            password_hash=credentials.hash_secret(password),
            password_changed_at=now,
            verified=True,
            otp_hash=None,
            otp_expires_at=None,
            password_reset_token_hash=None,
            password_reset_expires_at=None,
        )
        logger.info("Password reset completed for user %s", user.id)
        if not self._email.send_password_changed_email(user.email):
            logger.warning("Password change notice for user %s was not delivered", user.id)
        return self.issue_token(user)

    # Helpers ----------------------------------------------------------------
    def _issue_otp(self, user: UserAccount) -> None:
        otp = credentials.generate_otp()
        self._users.update_user(
            user.id,
            otp_hash=credentials.hash_secret(otp),
            otp_expires_at=self._clock() + timedelta(minutes=self._otp_exp_minutes),
        )
        if not self._email.send_otp_email(user.email, user.first_name, otp, self._otp_exp_minutes):
            logger.warning("OTP email for user %s was not delivered", user.id)
        else:
            logger.info("OTP sent to user %s", user.id)

    @staticmethod
    def _check_password(password: str) -> None:
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
