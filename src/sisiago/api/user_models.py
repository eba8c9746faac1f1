"""Request models for user management endpoints."""

from typing import Literal

from pydantic import BaseModel, model_validator


class UserStatusUpdate(BaseModel):
    """Change to a user's active flag or role."""

    is_active: bool | None = None
    role: Literal["admin", "manager", "user"] | None = None

    @model_validator(mode="after")
    def _require_change(self) -> "UserStatusUpdate":
        if self.is_active is None and self.role is None:
            raise ValueError("At least one of is_active or role must be provided")
        return self
