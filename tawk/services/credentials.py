"""Password, one-time code and reset token primitives."""

import hashlib
import secrets

import bcrypt

OTP_LENGTH = 6


def hash_secret(value: str) -> str:
    """Hash a password or one-time code with bcrypt."""
    return bcrypt.hashpw(value.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_secret(value: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(value.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def generate_otp(length: int = OTP_LENGTH) -> str:
    """Return a numeric one-time code, zero padded to ``length`` digits."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def hash_reset_token(token: str) -> str:
    """Digest a reset token; only the digest is persisted so it can be looked up."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
