"""
Security package for FastAPI authentication
"""

from .dependencies import CurrentUser, decode_token, get_current_user, get_optional_user

__all__ = ["CurrentUser", "decode_token", "get_current_user", "get_optional_user"]
