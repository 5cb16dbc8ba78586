"""Pydantic schemas for the authentication endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request schema for account registration."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)


class EmailPayload(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    email: EmailStr
    otp: str


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: Optional[str] = None
    password_confirm: Optional[str] = Field(default=None, alias="passwordConfirm")


class StatusResponse(BaseModel):
    """Success envelope shared by every auth endpoint."""

    status: str = "success"
    message: str


class TokenResponse(StatusResponse):
    token: str
