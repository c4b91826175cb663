"""Identity resolution from the auth cookie."""

import hashlib
import hmac
import json
from urllib.parse import unquote

from fastapi import Request

from ..config import settings
from .errors import SearchAPIError

AUTH_COOKIE = "auth"


def sign(username: str, secret: str) -> str:
    """Hex HMAC-SHA256 of a username."""
    return hmac.new(secret.encode(), username.encode(), hashlib.sha256).hexdigest()


def parse_auth_cookie(raw: str | None, secret: str = "") -> str | None:
    """
    Extract the username from an auth cookie value.

    The cookie holds URL-encoded JSON with at least a username. When a secret
    is configured the cookie must also carry a matching signature.

    Returns:
        Username, or None when the cookie is missing or invalid
    """
    if not raw:
        return None
    try:
        data = json.loads(unquote(raw))
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    username = data.get("username")
    if not isinstance(username, str) or not username:
        return None

    if secret:
        signature = data.get("signature")
        if not isinstance(signature, str) or not hmac.compare_digest(signature, sign(username, secret)):
            return None

    return username


def require_username(request: Request) -> str:
    """FastAPI dependency: the authenticated username, or 401."""
    username = parse_auth_cookie(request.cookies.get(AUTH_COOKIE), settings.auth_secret)
    if username is None:
        raise SearchAPIError(401, "Unauthorized")
    return username
