"""API router for signup, login and password reset."""

from fastapi import APIRouter, Depends

from ....application.services.auth_service import AuthService
from ....core.dependencies import get_auth_service
from ...api.schemas.auth import (
    EmailPayload,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    StatusResponse,
    TokenResponse,
    VerifyOtpRequest,
)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", response_model=StatusResponse)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> StatusResponse:
    """Create or refresh a pending account, then email it a one-time code."""
    registration = auth_service.register(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
    )
    auth_service.send_otp(registration)
    return StatusResponse(message="OTP Sent Successfully!")


@router.post("/send-otp", response_model=StatusResponse)
async def send_otp(
    payload: EmailPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> StatusResponse:
    auth_service.resend_otp(payload.email)
    return StatusResponse(message="OTP Sent Successfully!")


@router.post("/verify-otp", response_model=TokenResponse)
async def verify_otp(
    payload: VerifyOtpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    token = auth_service.verify_otp(payload.email, payload.otp)
    return TokenResponse(message="OTP verified successfully", token=token)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    token = auth_service.login(payload.email, payload.password)
    return TokenResponse(message="Logged in successfully", token=token)


@router.post("/forgot-password", response_model=StatusResponse)
async def forgot_password(
    payload: EmailPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> StatusResponse:
    auth_service.forgot_password(payload.email)
    return StatusResponse(message="Reset Password link sent to Email")


@router.post("/reset-password/{token}", response_model=TokenResponse)
async def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    new_token = auth_service.reset_password(token, payload.password, payload.password_confirm)
    return TokenResponse(message="Password Reset successfully", token=new_token)
