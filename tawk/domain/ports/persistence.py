from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from ..models import UserAccount


class UserRepository(Protocol):
    """Abstract storage for user account documents, keyed by email."""

    def find_by_email(self, email: str) -> Optional[UserAccount]:
        ...

    def find_by_id(self, user_id: int) -> Optional[UserAccount]:
        ...

    def find_with_active_otp(self, email: str, now: datetime) -> Optional[UserAccount]:
        ...

    def find_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserAccount]:
        ...

    def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
    ) -> UserAccount:
        ...

    def update_user(self, user_id: int, **changes: Any) -> UserAccount:
        ...
