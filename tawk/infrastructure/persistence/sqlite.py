import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...domain.models import UserAccount
from ...domain.ports.persistence import UserRepository

_UPDATABLE_COLUMNS = frozenset(
    {
        "first_name",
        "last_name",
        "password_hash",
        "verified",
        "otp_hash",
        "otp_expires_at",
        "password_reset_token_hash",
        "password_reset_expires_at",
        "password_changed_at",
    }
)


class SQLiteUserStore(UserRepository):
    """SQLite-backed implementation of the user account store."""

    def __init__(self, path: Path) -> None:
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    first_name TEXT NOT NULL,
                    last_name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    verified INTEGER NOT NULL DEFAULT 0,
                    otp_hash TEXT,
                    otp_expires_at TEXT,
                    password_reset_token_hash TEXT,
                    password_reset_expires_at TEXT,
                    password_changed_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_users_reset_token
                    ON users(password_reset_token_hash);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # UserRepository API ----------------------------------------------------
    def find_by_email(self, email: str) -> Optional[UserAccount]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE email = ?", (email.lower(),))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def find_by_id(self, user_id: int) -> Optional[UserAccount]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def find_with_active_otp(self, email: str, now: datetime) -> Optional[UserAccount]:
        with self._lock:
            cur = self._conn.execute(
                """
                SELECT * FROM users
                WHERE email = ? AND otp_hash IS NOT NULL
                    AND otp_expires_at IS NOT NULL AND otp_expires_at > ?
                """,
                (email.lower(), self._format_datetime(now)),
            )
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def find_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserAccount]:
        with self._lock:
            cur = self._conn.execute(
                """
                SELECT * FROM users
                WHERE password_reset_token_hash = ?
                    AND password_reset_expires_at IS NOT NULL
                    AND password_reset_expires_at > ?
                """,
                (token_hash, self._format_datetime(now)),
            )
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
    ) -> UserAccount:
        normalized = email.lower()
        now = self._now()
        with self._lock, self._conn:
            cur = self._conn.execute(
                """
                INSERT INTO users (
                    first_name, last_name, email, password_hash, verified, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, 0, ?, ?)
                """,
                (first_name, last_name, normalized, password_hash, now, now),
            )
            user_id = cur.lastrowid
            cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
        if not row:
            raise RuntimeError("Failed to persist user.")
        return self._row_to_user(row)

    def update_user(self, user_id: int, **changes: Any) -> UserAccount:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")
        assignments: List[str] = []
        params: List[Any] = []
        for column, value in changes.items():
            assignments.append(f"{column} = ?")
            params.append(self._to_column(value))
        assignments.append("updated_at = ?")
        params.append(self._now())
        params.append(user_id)
        with self._lock, self._conn:
            self._conn.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
        if not row:
            raise ValueError(f"User {user_id} not found.")
        return self._row_to_user(row)

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    @staticmethod
    def _format_datetime(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()

    @classmethod
    def _to_column(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, datetime):
            return cls._format_datetime(value)
        return value

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    def _optional_datetime(self, row: sqlite3.Row, column: str) -> Optional[datetime]:
        value = row[column]
        return self._parse_datetime(value) if value else None

    def _row_to_user(self, row: sqlite3.Row) -> UserAccount:
        fields: Dict[str, Any] = {
            "id": row["id"],
            "first_name": row["first_name"],
            "last_name": row["last_name"],
            "email": row["email"],
            "password_hash": row["password_hash"],
            "verified": bool(row["verified"]),
            "otp_hash": row["otp_hash"],
            "otp_expires_at": self._optional_datetime(row, "otp_expires_at"),
            "password_reset_token_hash": row["password_reset_token_hash"],
            "password_reset_expires_at": self._optional_datetime(row, "password_reset_expires_at"),
            "password_changed_at": self._optional_datetime(row, "password_changed_at"),
            "created_at": self._parse_datetime(row["created_at"]),
            "updated_at": self._parse_datetime(row["updated_at"]),
        }
        return UserAccount(**fields)
