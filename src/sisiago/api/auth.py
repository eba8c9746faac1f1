"""Session token authentication for API routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import jwt
from fastapi import Depends, HTTPException, Request, status

from sisiago.domain.users import Actor, RequestMetadata

if TYPE_CHECKING:
    from sisiago.containers import AppContainer


def _read_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    token = request.cookies.get(container.settings.auth_cookie_name)
    if token:
        return token
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


async def get_current_actor(request: Request) -> Actor:
    """Resolve the authenticated actor from the session token."""
    token = _read_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token required",
        )
    container: AppContainer = request.app.state.container
    try:
        payload = jwt.decode(
            token,
            container.settings.jwt_secret,
            algorithms=[container.settings.jwt_algorithm],
        )
    except jwt.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc
    user_id = payload.get("userId") or payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no user",
        )
    return Actor(id=str(user_id), email=payload.get("email"), role=payload.get("role"))


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Ensure the actor is an administrator."""
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Administrators only.",
        )
    return actor


def request_metadata(request: Request) -> RequestMetadata:
    """Extract client address and user agent for auditing."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address: str | None = forwarded.split(",")[0].strip() or None
    else:
        ip_address = request.headers.get("x-real-ip") or (
            request.client.host if request.client else None
        )
    return RequestMetadata(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
    )
