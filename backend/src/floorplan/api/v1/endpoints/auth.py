"""Authentication endpoints for the API."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from floorplan.core.auth import Token, TokenData, create_access_token, jwt_auth, role_for_password
from floorplan.core.config import Settings
from floorplan.core.dependencies import get_app_settings, get_session_registry
from floorplan.services.session_service import SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    """Login request model."""
    password: str
    restaurant_id: str = Field(min_length=1, max_length=100)


@router.post("/login", response_model=Token)
async def login(
    request: LoginRequest,
    settings: Settings = Depends(get_app_settings),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> Token:
    """Authenticate with password, start an editing session and return a JWT token.

    Args:
        request: The login request.

    Returns:
        Token: The JWT token.

    Raises:
        HTTPException: If the password is incorrect.
    """
    role = role_for_password(request.password, settings)
    if role is None:
        logger.warning(f"Failed login for restaurant {request.restaurant_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = sessions.create(request.restaurant_id, role)
    access_token = create_access_token(
        settings, session.session_id, session.restaurant_id, role
    )

    return Token(access_token=access_token)


@router.post("/verify")
async def verify_token(
    token: TokenData = Depends(jwt_auth),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> dict:
    """Verify that the token is valid.

    Returns:
        dict: The session the token belongs to.
    """
    return {
        "status": "authenticated",
        "restaurant_id": token.restaurant_id,
        "role": token.role,
        "session_active": sessions.get(token.sid) is not None,
    }


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: TokenData = Depends(jwt_auth),
    sessions: SessionRegistry = Depends(get_session_registry),
) -> None:
    """End the editing session; its open editors are discarded."""
    sessions.discard(token.sid)
