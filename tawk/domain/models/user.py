"""User account domain model for chat authentication."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class UserAccount:
    """
    Registered chat user.

    Attributes:
        id: Unique identifier
        first_name: Given name shown in conversations
        last_name: Family name shown in conversations
        email: Login identity (unique, lower-cased)
        password_hash: bcrypt hash of the password
        verified: Whether the email was confirmed with an OTP
        otp_hash: bcrypt hash of the pending one-time code
        otp_expires_at: When the pending one-time code stops being accepted
        password_reset_token_hash: SHA-256 digest of the pending reset token
        password_reset_expires_at: When the pending reset token stops being accepted
        password_changed_at: Last time the password was changed through a reset
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str
    verified: bool
    otp_hash: Optional[str]
    otp_expires_at: Optional[datetime]
    password_reset_token_hash: Optional[str]
    password_reset_expires_at: Optional[datetime]
    password_changed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    def changed_password_after(self, issued_at: float) -> bool:
        """Return True when the password changed after a token issued at ``issued_at`` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        return self.password_changed_at.timestamp() > issued_at

    def __repr__(self) -> str:
        return f"<UserAccount id={self.id} email={self.email} verified={self.verified}>"


@dataclass(frozen=True, slots=True)
class RegistrationResult:
    """Outcome of the registration stage, consumed by OTP issuance."""

    user_id: int
    email: str
    created: bool
