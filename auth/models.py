"""This module re-exports the credential models from the database package for use in authentication-related code.
"""

from database.models import RefreshToken, User  # noqa: F401

__all__ = ["RefreshToken", "User"]
