"""
app/services/user_service.py

Purpose: User data management

- Create user records
- Lookup by email or id
- Persist / clear the current session token
- Update avatar URL
"""

from app.db.mongo import get_users_collection
from app.core.logging import get_logger, LogContext
from app.core.exceptions import ConflictError
from utils.constants import EMAIL_IN_USE
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from datetime import datetime, timezone
from typing import Optional, Dict, Any

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_object_id(user_id: Any) -> Optional[ObjectId]:
    if isinstance(user_id, ObjectId):
        return user_id
    try:
        return ObjectId(str(user_id))
    except (InvalidId, TypeError):
        return None


async def email_exists(email: str) -> bool:
    """
    Checks whether an account already uses this email.
    """
    users = get_users_collection()
    user = await users.find_one({"email": email}, {"_id": 1})
    return user is not None


async def create_user(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Inserts a new user document.

    Args:
        document: Document built by app.models.user.new_user_document

    Returns:
        The inserted document, with its _id

    Raises:
        ConflictError: If the unique email index rejects the insert
    """
    with LogContext(email=document["email"]):
        users = get_users_collection()

        try:
            result = await users.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning("Signup lost race on unique email index")
            raise ConflictError(EMAIL_IN_USE) from e

        document["_id"] = result.inserted_id
        logger.info("New user created", extra={"user_id": str(result.inserted_id)})
        return document


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """
    Retrieves a user by email.

    Returns:
        User document or None if not found
    """
    users = get_users_collection()
    return await users.find_one({"email": email})


async def get_user_by_id(user_id: Any) -> Optional[Dict[str, Any]]:
    """
    Retrieves a user by id. Malformed ids are treated as not found.

    Returns:
        User document or None if not found
    """
    object_id = _as_object_id(user_id)
    if object_id is None:
        return None

    users = get_users_collection()
    return await users.find_one({"_id": object_id})


async def set_user_token(user_id: Any, token: Optional[str]) -> bool:
    """
    Stores the session token for a user. Passing None logs the user out.

    Returns:
        True if a user matched
    """
    with LogContext(user_id=str(user_id)):
        users = get_users_collection()

        result = await users.update_one(
            {"_id": _as_object_id(user_id)},
            {"$set": {"token": token, "updated_at": _now()}}
        )

        matched = result.matched_count > 0
        if not matched:
            logger.warning("Token update matched no user")
        return matched


async def update_avatar_url(user_id: Any, avatar_url: str) -> Optional[Dict[str, Any]]:
    """
    Points the user's avatar at a new URL.

    Returns:
        The updated document, or None if the user no longer exists
    """
    with LogContext(user_id=str(user_id)):
        users = get_users_collection()

        user = await users.find_one_and_update(
            {"_id": _as_object_id(user_id)},
            {"$set": {"avatarURL": avatar_url, "updated_at": _now()}},
            return_document=ReturnDocument.AFTER
        )

        if user:
            logger.info("Avatar updated", extra={"avatar_url": avatar_url})
        return user
