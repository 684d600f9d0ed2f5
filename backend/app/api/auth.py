"""Minimal auth dependency.

Stub implementation that extracts the user id (and admin flag) from a bearer
token or uses dev defaults. The real identity provider sits in front of this
service and is out of scope here.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from backend.app.db.context import RequestContext

DEV_ADMIN_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Accepted formats:
    - no header: dev admin user
    - "Bearer <user_id>": regular user
    - "Bearer <user_id>:admin": admin user

    Args:
        authorization: Authorization header (e.g., "Bearer <token>")

    Returns:
        RequestContext with user_id and admin flag

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=DEV_ADMIN_USER_ID, is_admin=True)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "
    user_part, _, role = token.partition(":")

    if role not in ("", "admin"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected user_id[:admin])",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = uuid.UUID(user_part)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected user_id[:admin])",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return RequestContext(user_id=user_id, is_admin=role == "admin")


async def require_admin(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
) -> RequestContext:
    """Reject non-admin callers with 403."""
    if not ctx.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return ctx
