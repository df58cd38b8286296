"""
app/api/auth.py

Purpose: Users API

- POST /signup, POST /login
- GET /logout, GET /current (authenticated)
- PATCH /avatars (authenticated, multipart upload)
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.dependencies import get_current_user
from app.core.exceptions import BadRequestError
from app.core.logging import get_logger
from app.schemas.auth import (
    AvatarResponse,
    Credentials,
    LoginResponse,
    PublicUser,
    SignupResponse,
)
from app.schemas.response import MessageResponse
from app.services import auth_service, avatar_service
from utils.constants import LOGGED_OUT, NO_FILE_UPLOADED

logger = get_logger(__name__)
router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: Credentials):
    """
    Registers an account. 409 if the email is taken.
    """
    user = await auth_service.signup(body.email, body.password)
    return {
        "user": {
            "email": user["email"],
            "subscription": user["subscription"],
            "avatarURL": user["avatarURL"],
        }
    }


@router.post("/login", response_model=LoginResponse)
async def login(body: Credentials):
    """
    Exchanges credentials for a session token.
    """
    token, user = await auth_service.login(body.email, body.password)
    return {
        "token": token,
        "user": {
            "email": user["email"],
            "subscription": user["subscription"],
        },
    }


@router.get("/logout", response_model=MessageResponse)
async def logout(user: Dict[str, Any] = Depends(get_current_user)):
    await auth_service.logout(user)
    return {"message": LOGGED_OUT}


@router.get("/current", response_model=PublicUser)
async def current(user: Dict[str, Any] = Depends(get_current_user)):
    return {"email": user["email"], "subscription": user["subscription"]}


@router.patch("/avatars", response_model=AvatarResponse)
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    user: Dict[str, Any] = Depends(get_current_user),
):
    """
    Replaces the user's avatar with an uploaded image, resized to a square.

    Form field: avatar
    """
    if avatar is None or not avatar.filename:
        raise BadRequestError(NO_FILE_UPLOADED)

    try:
        avatar_url = await avatar_service.replace_avatar(user, avatar)
    finally:
        await avatar.close()

    return {"avatarURL": avatar_url}
