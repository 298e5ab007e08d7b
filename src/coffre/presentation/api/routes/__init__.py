"""
API routers.
"""

from coffre.presentation.api.routes import auth, health, transfer, users, wallet

__all__ = ["auth", "health", "transfer", "users", "wallet"]
