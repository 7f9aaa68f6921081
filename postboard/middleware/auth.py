"""
Postboard Backend — Authorization Middleware
==============================================

What:  Decodes the bearer token of every request into an optional identity.
How:   Reads `Authorization: Bearer <token>`, verifies it with the credential
       service and stores the result on request.state:
           request.state.identity  → Identity | None
           request.state.is_auth   → bool
Who:   Applied to every request; read by the get_identity dependency.

Failure model:
    This middleware never rejects a request. A missing header, another scheme
    or an invalid/expired token all leave the request anonymous. Operations
    that need a caller call require_identity(), which raises
    AuthenticationError ("Not authenticated!", 401).
"""

import logging
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from postboard.exceptions import AuthenticationError
from postboard.schemas.auth import Identity
from postboard.services.auth_service import credential_service

logger = logging.getLogger(__name__)


def extract_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Returns the token of a "Bearer <token>" header value, or None."""
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthMiddleware(BaseHTTPMiddleware):
    """Attaches the caller's identity (or None) to the request state."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        identity: Optional[Identity] = None

        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is not None:
            identity = credential_service.decode_token(token)
            if identity is None:
                logger.debug("Invalid bearer token on %s %s", request.method, request.url.path)

        request.state.identity = identity
        request.state.is_auth = identity is not None

        return await call_next(request)


# ── Dependencies ──────────────────────────────────────────────────────────

async def get_identity(request: Request) -> Optional[Identity]:
    """FastAPI dependency: the identity set by AuthMiddleware, or None."""
    return getattr(request.state, "identity", None)


def require_identity(identity: Optional[Identity]) -> Identity:
    """
    Raises:
        AuthenticationError: the request is anonymous
    """
    if identity is None:
        raise AuthenticationError()
    return identity


async def get_current_identity(request: Request) -> Identity:
    """FastAPI dependency for REST routes that only serve authenticated callers."""
    return require_identity(await get_identity(request))
