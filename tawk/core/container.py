from dataclasses import dataclass

from ..application.services.auth_service import AuthService
from ..domain.ports.persistence import UserRepository
from ..services.email_service import EmailService
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    repository: UserRepository
    email_service: EmailService
    auth_service: AuthService
