"""
Authentication API routes.

Provides endpoints for wallet sessions:
- POST /auth/login - Log a wallet in (registers unknown wallets)
- GET /auth/verify - Validate the bearer session
- POST /auth/logout - Revoke the bearer session
"""

from fastapi import APIRouter, Depends, Request, status

from coffre.application.services.session_manager import (
    ClientMetadata,
    SessionManager,
    ValidatedSession,
)
from coffre.application.use_cases.login_user import LoginUser
from coffre.di.dependencies import get_login_user, get_session_manager
from coffre.presentation.api.middleware.auth import (
    get_bearer_token,
    get_current_session,
)
from coffre.presentation.api.middleware.rate_limit_middleware import (
    client_ip,
    client_user_agent,
)
from coffre.presentation.schemas.auth_schemas import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    VerifyResponse,
)
from coffre.presentation.schemas.common import ApiResponse
from coffre.presentation.schemas.user_schemas import UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    status_code=status.HTTP_200_OK,
    summary="Log in with a wallet address",
)
async def login(
    body: LoginRequest,
    request: Request,
    use_case: LoginUser = Depends(get_login_user),
) -> ApiResponse[LoginResponse]:
    """
    Log a wallet in and issue a bearer session token.

    Raises:
        ValidationError: 400 if the address is malformed
        AccountLockedError: 423 if the account is locked
    """
    result = await use_case.execute(
        wallet_address=body.wallet_address,
        client=ClientMetadata(
            ip_address=client_ip(request),
            user_agent=client_user_agent(request),
        ),
    )
    issued = result.issued

    return ApiResponse(
        message="Login successful",
        data=LoginResponse(
            access_token=issued.token,
            expires_in=int(
                (issued.session.expires_at - issued.session.created_at).total_seconds()
            ),
            expires_at=issued.session.expires_at,
            is_new_user=result.is_new_user,
            user=UserResponse.model_validate(issued.user.to_public_dict()),
        ),
    )


@router.get(
    "/verify",
    response_model=ApiResponse[VerifyResponse],
    summary="Verify the bearer session",
)
async def verify(
    current: ValidatedSession = Depends(get_current_session),
) -> ApiResponse[VerifyResponse]:
    return ApiResponse(
        message="Session is valid",
        data=VerifyResponse(
            wallet_address=current.user.wallet_address,
            session_id=str(current.session.id),
            expires_at=current.session.expires_at,
            user=UserResponse.model_validate(current.user.to_public_dict()),
        ),
    )


@router.post(
    "/logout",
    response_model=ApiResponse[LogoutResponse],
    summary="Revoke the bearer session",
)
async def logout(
    token: str = Depends(get_bearer_token),
    current: ValidatedSession = Depends(get_current_session),
    session_manager: SessionManager = Depends(get_session_manager),
) -> ApiResponse[LogoutResponse]:
    """Remove the presented token's session; other sessions stay valid."""
    removed = await session_manager.revoke(current.user.wallet_address, token)
    return ApiResponse(
        message="Logged out",
        data=LogoutResponse(logged_out=removed),
    )
