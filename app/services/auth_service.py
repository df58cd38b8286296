"""
app/services/auth_service.py

Purpose: Account and session flows

- Signup: uniqueness check, bcrypt hash, gravatar, insert
- Login: credential check, JWT issue, token persisted on the user
- Logout: stored token cleared so it stops authenticating
- Token resolution for the authentication dependency
"""

import asyncio
from typing import Any, Dict, Optional, Tuple

import jwt

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError
from app.core.logging import get_logger, LogContext
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.models.user import new_user_document
from app.services import user_service
from utils.avatar_utils import gravatar_url
from utils.constants import EMAIL_IN_USE, NO_SUCH_USER, NOT_AUTHORIZED, WRONG_CREDENTIALS

logger = get_logger(__name__)


async def signup(email: str, password: str) -> Dict[str, Any]:
    """
    Registers a new account.

    Returns:
        The stored user document

    Raises:
        ConflictError: If the email is already registered
    """
    with LogContext(email=email):
        if await user_service.email_exists(email):
            logger.info("Signup rejected: email already registered")
            raise ConflictError(EMAIL_IN_USE)

        password_hash = await asyncio.to_thread(hash_password, password)
        avatar_url = gravatar_url(
            email, size=settings.AVATAR_SIZE, default=settings.GRAVATAR_DEFAULT
        )

        user = await user_service.create_user(
            new_user_document(email, password_hash, avatar_url)
        )
        return user


async def login(email: str, password: str) -> Tuple[str, Dict[str, Any]]:
    """
    Checks credentials and issues a session token.

    Returns:
        (token, user document)

    Raises:
        AuthenticationError: Unknown email or wrong password
    """
    with LogContext(email=email):
        user = await user_service.get_user_by_email(email)
        if user is None:
            logger.info("Login rejected: unknown email")
            raise AuthenticationError(NO_SUCH_USER)

        password_ok = await asyncio.to_thread(verify_password, password, user["password"])
        if not password_ok:
            logger.info("Login rejected: wrong password")
            raise AuthenticationError(WRONG_CREDENTIALS)

        token = create_access_token(
            user_id=str(user["_id"]),
            email=user["email"],
            subscription=user["subscription"],
        )
        await user_service.set_user_token(user["_id"], token)
        user["token"] = token

        logger.info("Session token issued", extra={"user_id": str(user["_id"])})
        return token, user


async def logout(user: Dict[str, Any]):
    """
    Invalidates the user's current session token.
    """
    await user_service.set_user_token(user["_id"], None)
    logger.info("User logged out", extra={"user_id": str(user["_id"])})


async def resolve_token(token: Optional[str]) -> Dict[str, Any]:
    """
    Maps a bearer token to its user.

    The token must verify, name an existing user, and still be that user's
    stored token (logout and re-login both invalidate older tokens).

    Raises:
        AuthenticationError: For any failure
    """
    if not token:
        raise AuthenticationError(NOT_AUTHORIZED)

    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected token: {e}")
        raise AuthenticationError(NOT_AUTHORIZED) from e

    user = await user_service.get_user_by_id(payload.get("id"))
    if user is None or user.get("token") != token:
        raise AuthenticationError(NOT_AUTHORIZED)

    return user
