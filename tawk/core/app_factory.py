from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .errors import TawkError
from .logging import configure_logging
from ..application.services.auth_service import AuthService
from ..infrastructure.persistence.sqlite import SQLiteUserStore
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import users as users_router
from ..services.email_service import EmailService

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Tawk Chat API", lifespan=_create_lifespan(settings, email_service))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TawkError, _handle_tawk_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)

    app.include_router(auth_router.router)
    app.include_router(users_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


async def _handle_tawk_error(request: Request, exc: TawkError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": message},
    )


def _create_lifespan(settings: Settings, email_service: Optional[EmailService]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        repository = SQLiteUserStore(settings.database_path)
        mailer = email_service or EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
        )
        if not mailer.enabled:
            logger.warning("SMTP is not configured; emails will be logged instead of sent.")
        auth_service = AuthService(
            repository=repository,
            email_service=mailer,
            secret_key=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            token_exp_minutes=settings.jwt_exp_minutes,
            otp_exp_minutes=settings.otp_exp_minutes,
            reset_exp_minutes=settings.password_reset_exp_minutes,
            frontend_base_url=settings.frontend_base_url,
        )

        app.state.container = ApplicationContainer(  # type: ignore[attr-defined]
            settings=settings,
            repository=repository,
            email_service=mailer,
            auth_service=auth_service,
        )

        try:
            yield
        finally:
            repository.close()

    return lifespan
