"""
User API routes.

Provides endpoints for the authenticated user:
- GET /users/me - Public profile
- PUT /users/me - Partial profile update
- GET /users/me/stats - Account summary
"""

from fastapi import APIRouter, Depends

from coffre.application.use_cases.get_user_profile import GetUserProfile
from coffre.application.use_cases.get_user_stats import GetUserStats
from coffre.application.use_cases.update_user_profile import (
    UpdateUserProfile,
    UpdateUserProfileCommand,
)
from coffre.di.dependencies import (
    get_get_user_profile,
    get_get_user_stats,
    get_update_user_profile,
)
from coffre.domain.entities.user import User
from coffre.presentation.api.middleware.auth import get_current_user
from coffre.presentation.schemas.common import ApiResponse
from coffre.presentation.schemas.user_schemas import (
    UpdateProfileRequest,
    UserResponse,
    UserStatsResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Get current user",
)
async def get_me(
    current_user: User = Depends(get_current_user),
    use_case: GetUserProfile = Depends(get_get_user_profile),
) -> ApiResponse[UserResponse]:
    user = await use_case.execute(current_user.id)
    return ApiResponse(data=UserResponse.model_validate(user.to_public_dict()))


@router.put(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Update current user profile",
)
async def update_me(
    body: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    use_case: UpdateUserProfile = Depends(get_update_user_profile),
) -> ApiResponse[UserResponse]:
    """
    Apply a partial profile update.

    Omitted fields keep their value; preferences are merged.

    Raises:
        ValidationError: 400 if a field value is rejected
        DuplicateEntityError: 409 if email or username is taken
    """
    preferences = (
        body.preferences.model_dump(mode="json", exclude_none=True)
        if body.preferences
        else None
    )
    user = await use_case.execute(
        UpdateUserProfileCommand(
            user_id=current_user.id,
            email=body.email,
            username=body.username,
            first_name=body.first_name,
            last_name=body.last_name,
            bio=body.bio,
            avatar=body.avatar,
            preferences=preferences,
        )
    )
    return ApiResponse(
        message="Profile updated",
        data=UserResponse.model_validate(user.to_public_dict()),
    )


@router.get(
    "/me/stats",
    response_model=ApiResponse[UserStatsResponse],
    summary="Get current user account summary",
)
async def get_my_stats(
    current_user: User = Depends(get_current_user),
    use_case: GetUserStats = Depends(get_get_user_stats),
) -> ApiResponse[UserStatsResponse]:
    stats = await use_case.execute(current_user.id)
    return ApiResponse(
        data=UserStatsResponse(
            account_age_days=stats.account_age_days,
            last_login=stats.last_login,
            active_sessions=stats.active_sessions,
            wallet_data=stats.wallet_data,
            preferences=stats.preferences,
        )
    )
