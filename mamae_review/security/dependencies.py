"""
Authentication dependencies for FastAPI.

The identity provider issues JWTs; this service only verifies them and
reads the opaque user id ("sub") and display name.
"""

from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mamae_review.core.config import config
from mamae_review.core.logger import logger
from mamae_review.models.user import CurrentUser

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> CurrentUser:
    """
    Validate a JWT and build the identity it carries.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.warning("Expired JWT token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except jwt.InvalidTokenError as e:
        logger.warning("JWT validation error", metadata={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )

    user = CurrentUser.from_claims(payload)
    logger.debug("User authenticated", user_id=user.user_id)
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """
    FastAPI dependency to get the current authenticated user.

    Usage:
        @router.post("/products")
        async def create_product(user: CurrentUser = Depends(get_current_user)):
            ...
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[CurrentUser]:
    """Current user if a valid token was sent, None otherwise"""
    if not credentials:
        return None

    try:
        return decode_token(credentials.credentials)
    except HTTPException:
        return None
