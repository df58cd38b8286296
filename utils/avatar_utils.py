"""
utils/avatar_utils.py

Purpose: Avatar helpers

- Gravatar URL for new accounts
- Stored avatar filename generation
"""

import hashlib
import time
from pathlib import PurePath
from typing import Optional
from urllib.parse import urlencode

GRAVATAR_BASE_URL = "https://www.gravatar.com/avatar/"


def gravatar_url(email: str, size: int = 250, default: str = "retro") -> str:
    """
    Builds the Gravatar URL for an email address.

    Gravatar keys avatars by the MD5 of the trimmed, lowercased address.

    Args:
        email: Account email
        size: Edge length in pixels
        default: Fallback style when no Gravatar exists (retro, identicon, ...)

    Returns:
        Absolute Gravatar URL
    """
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    query = urlencode({"s": str(size), "d": default})
    return f"{GRAVATAR_BASE_URL}{digest}?{query}"


def build_avatar_filename(user_id: str, original_filename: Optional[str], timestamp_ms: Optional[int] = None) -> str:
    """
    Returns "<user_id>_<epoch millis><ext>" for an uploaded avatar.

    Only the extension of the client filename is kept, lowercased.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    ext = PurePath(original_filename or "").suffix.lower()
    return f"{user_id}_{timestamp_ms}{ext}"
