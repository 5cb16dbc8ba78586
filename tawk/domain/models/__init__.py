"""Domain models for the Tawk chat backend."""

from .user import RegistrationResult, UserAccount

__all__ = [
    "RegistrationResult",
    "UserAccount",
]
