"""API router for the signed-in user."""

from fastapi import APIRouter, Depends

from ....domain.models import UserAccount
from ...api.dependencies import get_current_user
from ...api.schemas.user import UserProfile, UserProfileResponse

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=UserProfileResponse)
async def get_profile(user: UserAccount = Depends(get_current_user)) -> UserProfileResponse:
    """Get current user profile."""
    return UserProfileResponse(
        data=UserProfile(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            verified=user.verified,
            created_at=user.created_at,
        )
    )
