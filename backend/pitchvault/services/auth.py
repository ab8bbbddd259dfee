"""Admin authentication.

Admin mode is a single shared secret. The check sits behind the
``Authenticator`` protocol so the secret source can be swapped without
touching the routes.
"""
import hmac
import logging
from typing import Optional, Protocol

from fastapi import Depends, Header, Request

from pitchvault.errors import Unauthorized

logger = logging.getLogger(__name__)


class Authenticator(Protocol):
    def verify(self, credential: Optional[str]) -> bool:
        ...


class StaticTokenAuthenticator:
    """Accepts exactly one configured secret, compared case-sensitively."""

    def __init__(self, secret: str):
        self._secret = secret or ""

    def verify(self, credential: Optional[str]) -> bool:
        if not self._secret or not credential:
            return False
        return hmac.compare_digest(self._secret.encode("utf-8"), credential.encode("utf-8"))


def get_authenticator(request: Request) -> Authenticator:
    """FastAPI dependency that returns the authenticator built at startup."""
    return request.app.state.authenticator


async def _body_admin_token(request: Request) -> Optional[str]:
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("application/json"):
        return None
    try:
        body = await request.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        token = body.get("adminToken")
        if isinstance(token, str):
            return token
    return None


async def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None),
    authenticator: Authenticator = Depends(get_authenticator),
) -> None:
    """Reject the request unless the Authorization header or body adminToken is the admin secret."""
    credential = authorization or await _body_admin_token(request)
    if not authenticator.verify(credential):
        logger.warning(f"Rejected admin request: {request.method} {request.url.path}")
        raise Unauthorized("Unauthorized access")
