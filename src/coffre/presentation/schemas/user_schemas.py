"""
User API schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from coffre.domain.entities.user import Currency


class ProfileResponse(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None


class NotificationPreferences(BaseModel):
    email: bool
    push: bool
    transactions: bool


class PrivacyPreferences(BaseModel):
    show_balance: bool
    show_transactions: bool


class PreferencesResponse(BaseModel):
    currency: Currency
    notifications: NotificationPreferences
    privacy: PrivacyPreferences


class WalletDataResponse(BaseModel):
    last_balance: Optional[str] = None
    last_balance_update: Optional[datetime] = None
    transaction_count: int = 0


class UserResponse(BaseModel):
    """
    Public user view.

    Sessions and security metadata are never exposed.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    wallet_address: str
    email: Optional[str] = None
    username: Optional[str] = None
    profile: ProfileResponse
    preferences: PreferencesResponse
    wallet_data: WalletDataResponse
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ================================================================
# Profile Update Schemas
# ================================================================


class NotificationPreferencesUpdate(BaseModel):
    email: Optional[bool] = None
    push: Optional[bool] = None
    transactions: Optional[bool] = None


class PrivacyPreferencesUpdate(BaseModel):
    show_balance: Optional[bool] = None
    show_transactions: Optional[bool] = None


class PreferencesUpdate(BaseModel):
    """Partial preferences; omitted keys keep their current value."""

    currency: Optional[Currency] = None
    notifications: Optional[NotificationPreferencesUpdate] = None
    privacy: Optional[PrivacyPreferencesUpdate] = None


class UpdateProfileRequest(BaseModel):
    """Partial profile update."""

    email: Optional[str] = Field(
        None,
        max_length=254,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        examples=["alice@example.com"],
    )
    username: Optional[str] = Field(
        None,
        description="3-30 letters, digits or underscores",
        examples=["alice_eth"],
    )
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=500)
    preferences: Optional[PreferencesUpdate] = None


class UserStatsResponse(BaseModel):
    account_age_days: int
    last_login: Optional[datetime] = None
    active_sessions: int
    wallet_data: WalletDataResponse
    preferences: PreferencesResponse
