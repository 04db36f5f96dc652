"""Registration, login and session routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..deps import Services, get_bearer_token, get_current_user, get_services, validation_error
from ..schemas.auth import LoginRequest, RegisterRequest, SessionResponse, UserResponse
from ...storage import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def user_response(services: Services, user: User) -> UserResponse:
    profile = services.accounts.get_profile(user.id)
    return UserResponse(
        id=user.id,
        email=user.email,
        name=profile.name if profile else None,
        avatar_url=profile.avatar_url if profile else None,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
def register(payload: RegisterRequest, services: Services = Depends(get_services)):
    try:
        user = services.accounts.register(payload.email, payload.password, payload.name)
    except ValueError as e:
        raise validation_error(e)
    return user_response(services, user)


@router.post("/login", response_model=SessionResponse)
def login(payload: LoginRequest, services: Services = Depends(get_services)):
    result = services.accounts.login(payload.email, payload.password)
    if not result:
        raise HTTPException(
            status_code=401,
            detail={"success": False, "error": "auth_error", "detail": "Invalid email or password"},
        )
    user, session = result
    return SessionResponse(
        access_token=session.token,
        expires_at=session.expires_at.isoformat() if session.expires_at else None,
        user=user_response(services, user),
    )


@router.post("/signout")
def signout(
    token: Optional[str] = Depends(get_bearer_token),
    services: Services = Depends(get_services),
):
    """End the current session. Signing out twice is not an error."""
    if token:
        services.accounts.sign_out(token)
    return {"success": True}


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    return user_response(services, user)
