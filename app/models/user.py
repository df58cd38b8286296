"""
app/models/user.py

Purpose: User document model

- Email and bcrypt password hash
- Subscription tier
- Avatar URL
- Currently valid session token
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any


class Subscription(str, Enum):
    STARTER = "starter"
    PRO = "pro"
    BUSINESS = "business"


DEFAULT_SUBSCRIPTION = Subscription.STARTER


def new_user_document(email: str, password_hash: str, avatar_url: str) -> Dict[str, Any]:
    """
    Builds a fresh users document ready for insert_one.
    """
    now = datetime.now(timezone.utc)
    return {
        "email": email,
        "password": password_hash,
        "subscription": DEFAULT_SUBSCRIPTION.value,
        "avatarURL": avatar_url,
        "token": None,
        "created_at": now,
        "updated_at": now,
    }
