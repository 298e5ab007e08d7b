"""
Application use cases.
"""

from coffre.application.use_cases.get_transaction_history import (
    GetTransactionHistory,
)
from coffre.application.use_cases.get_user_profile import GetUserProfile
from coffre.application.use_cases.get_user_stats import GetUserStats, UserStats
from coffre.application.use_cases.get_wallet_balance import (
    GetWalletBalance,
    WalletBalanceResult,
)
from coffre.application.use_cases.get_wallet_overview import (
    GetWalletOverview,
    WalletOverview,
)
from coffre.application.use_cases.login_user import LoginResult, LoginUser
from coffre.application.use_cases.update_user_profile import (
    UpdateUserProfile,
    UpdateUserProfileCommand,
)

__all__ = [
    "LoginUser",
    "LoginResult",
    "GetUserProfile",
    "UpdateUserProfile",
    "UpdateUserProfileCommand",
    "GetUserStats",
    "UserStats",
    "GetWalletBalance",
    "WalletBalanceResult",
    "GetTransactionHistory",
    "GetWalletOverview",
    "WalletOverview",
]
