"""
Authentication infrastructure.
"""

from coffre.infrastructure.auth.jwt_handler import JWTHandler

__all__ = ["JWTHandler"]
