"""User management endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from sisiago.api.auth import request_metadata, require_admin
from sisiago.api.user_models import UserStatusUpdate
from sisiago.domain.users import Actor
from sisiago.services.users import (
    SelfModificationError,
    UserNotFoundError,
    serialize_user,
)

if TYPE_CHECKING:
    from sisiago.containers import AppContainer

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/{user_id}/status")
async def update_user_status(
    user_id: str,
    update: UserStatusUpdate,
    request: Request,
    actor: Actor = Depends(require_admin),
) -> dict[str, object]:
    """Change a user's status or role and record the change."""
    container: AppContainer = request.app.state.container
    try:
        user = container.user_service.update_status(
            user_id,
            actor=actor,
            metadata=request_metadata(request),
            is_active=update.is_active,
            role=update.role,
        )
    except SelfModificationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except UserNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        ) from exc
    return {"message": "User status updated", "user": serialize_user(user)}
