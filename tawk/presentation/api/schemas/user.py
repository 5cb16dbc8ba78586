"""Pydantic schemas for user endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    id: int
    first_name: str = Field(serialization_alias="firstName")
    last_name: str = Field(serialization_alias="lastName")
    email: str
    verified: bool
    created_at: datetime = Field(serialization_alias="createdAt")


class UserProfileResponse(BaseModel):
    status: str = "success"
    data: UserProfile
