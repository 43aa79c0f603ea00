"""
FastAPI dependencies: authentication, role checks and database session.

Authentication is stateless: the identity comes straight from a verified
token and the store is not consulted, so a role change takes effect once
the user's current token expires.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import Identity, InvalidTokenError, decode_access_token
from app.db.session import get_db  # noqa: F401  (re-exported for endpoints)
from app.models.user import Role

logger = logging.getLogger(__name__)

# auto_error=False so a missing header becomes our own 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def _verify(credentials: HTTPAuthorizationCredentials) -> Identity:
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as exc:
        logger.info("Rejected token: %s", exc)
        raise AuthorizationError("Invalid or expired token") from exc


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Verify the bearer token. No token is 401, a bad token is 403."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    return _verify(credentials)


async def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity | None:
    """Like :func:`get_current_identity` but anonymous callers get ``None``."""
    if credentials is None or not credentials.credentials:
        return None
    return _verify(credentials)


def require_roles(*allowed: Role) -> Callable[..., Coroutine[Any, Any, Identity]]:
    """Build a dependency admitting only identities whose role is in *allowed*.

    Every role, admin included, must be listed explicitly.
    """
    allowed_roles = frozenset(Role(r) for r in allowed)

    async def _checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed_roles:
            logger.info(
                "User %d (%s) denied; route allows %s",
                identity.user_id,
                identity.role.value,
                sorted(r.value for r in allowed_roles),
            )
            raise AuthorizationError("Access denied: insufficient privileges")
        return identity

    return _checker


require_admin = require_roles(Role.ADMIN)
require_user_or_admin = require_roles(Role.USER, Role.ADMIN)
