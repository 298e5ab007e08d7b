"""
Authentication API schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from coffre.presentation.schemas.user_schemas import UserResponse


class LoginRequest(BaseModel):
    """Log a wallet in; unknown wallets are registered."""

    wallet_address: str = Field(
        ...,
        min_length=42,
        max_length=42,
        description="Ethereum address (0x + 40 hex characters)",
        examples=["0x742d35cc6634c0532925a3b844bc454e4438f44e"],
    )


class LoginResponse(BaseModel):
    access_token: str = Field(..., description="Bearer session token")
    token_type: str = Field(default="Bearer")
    expires_in: int = Field(..., description="Seconds until expiry")
    expires_at: datetime
    is_new_user: bool
    user: UserResponse


class VerifyResponse(BaseModel):
    valid: bool = True
    wallet_address: str
    session_id: str
    expires_at: datetime
    user: UserResponse


class LogoutResponse(BaseModel):
    logged_out: bool
