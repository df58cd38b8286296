"""
app/api/dependencies.py

Purpose: Request dependencies

- Bearer token extraction
- Resolves the authenticated user for protected routes
"""

from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.services.auth_service import resolve_token

# Missing or non-Bearer credentials yield None; resolve_token answers 401
_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Dict[str, Any]:
    """
    Returns the user document for the request's bearer token.
    """
    token = credentials.credentials if credentials else None
    return await resolve_token(token)
