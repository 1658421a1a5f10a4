"""Authentication module for the application.

This module provides functions for password verification and JWT token generation.
"""

import time
from datetime import datetime, timedelta
from typing import Dict, Optional

import jwt
from fastapi import HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from floorplan.core.config import Settings

DEFAULT_JWT_SECRET = "floorplan-jwt-secret-key"
JWT_ALGORITHM = "HS256"


class Token(BaseModel):
    """Token response model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Token data model."""
    exp: float
    sid: str
    restaurant_id: str
    role: str


def role_for_password(password: str, settings: Settings) -> Optional[str]:
    """Return the role a password grants, or None if it matches no role.

    Args:
        password: The password to verify.
        settings: Application settings holding the configured passwords.

    Returns:
        Optional[str]: ``"manager"`` or ``"staff"``, None if the password is wrong.
    """
    if settings.auth_password and password == settings.auth_password:
        return "manager"
    if settings.staff_password and password == settings.staff_password:
        return "staff"
    return None


def _secret(settings: Settings) -> str:
    return settings.jwt_secret or DEFAULT_JWT_SECRET


def create_access_token(
    settings: Settings, session_id: str, restaurant_id: str, role: str
) -> str:
    """Create a new JWT access token for an editing session.

    Returns:
        str: The JWT access token.
    """
    expire = datetime.utcnow() + timedelta(days=settings.jwt_expiration_days)

    to_encode = {
        "exp": expire.timestamp(),
        "sid": session_id,
        "restaurant_id": restaurant_id,
        "role": role,
    }

    return jwt.encode(to_encode, _secret(settings), algorithm=JWT_ALGORITHM)


def decode_token(token: str, settings: Settings) -> Optional[Dict]:
    """Decode and validate a JWT token.

    Args:
        token: The JWT token to decode.
        settings: Application settings holding the signing secret.

    Returns:
        Optional[Dict]: The decoded token payload if valid, None otherwise.
    """
    try:
        payload = jwt.decode(token, _secret(settings), algorithms=[JWT_ALGORITHM])

        if payload["exp"] < time.time():
            return None

        return payload
    except jwt.PyJWTError:
        return None


# Bearer token authentication
class JWTBearer(HTTPBearer):
    """JWT Bearer token authentication."""

    def __init__(self, auto_error: bool = True):
        super(JWTBearer, self).__init__(auto_error=auto_error)

    async def __call__(self, request: Request) -> TokenData:
        """Validate the JWT token in the Authorization header.

        Args:
            request: The FastAPI request object.

        Returns:
            TokenData: The decoded token data.

        Raises:
            HTTPException: If the token is invalid or missing.
        """
        credentials: HTTPAuthorizationCredentials = await super(JWTBearer, self).__call__(request)

        if credentials:
            if not credentials.scheme == "Bearer":
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Invalid authentication scheme."
                )

            payload = decode_token(credentials.credentials, request.app.state.settings)
            if payload is None or "sid" not in payload:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Invalid or expired token."
                )

            return TokenData(**payload)
        else:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid authorization credentials."
            )


# Dependency for protected routes
jwt_auth = JWTBearer()
