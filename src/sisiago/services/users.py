"""User status management service."""

from dataclasses import dataclass
from typing import Protocol

from sisiago.domain.audit import AuditOperation
from sisiago.domain.users import USER_ROLES, Actor, RequestMetadata, UserRecord
from sisiago.services.audit import AuditLogger


class UserNotFoundError(LookupError):
    """Raised when a user does not exist."""


class SelfModificationError(ValueError):
    """Raised when an admin tries to change their own status or role."""


class UserRepository(Protocol):
    """Persistence interface for users."""

    def get_user(self, user_id: str) -> UserRecord | None:
        """Return a user by id."""

    def get_users(self, user_ids: set[str]) -> dict[str, UserRecord]:
        """Return known users keyed by id."""

    def update_user(self, user_id: str, changes: dict[str, object]) -> UserRecord:
        """Apply changes to a user and return the updated row."""


@dataclass
class UserService:
    """Service for user status and role changes."""

    repository: UserRepository
    audit_logger: AuditLogger

    def update_status(
        self,
        user_id: str,
        *,
        actor: Actor,
        metadata: RequestMetadata,
        is_active: bool | None = None,
        role: str | None = None,
    ) -> UserRecord:
        """Change a user's active flag or role and audit the change."""
        if actor.id == user_id:
            raise SelfModificationError("You cannot change your own status or role")
        if is_active is None and role is None:
            raise ValueError("At least one of is_active or role must be provided")
        if role is not None and role not in USER_ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        existing = self.repository.get_user(user_id)
        if existing is None:
            raise UserNotFoundError(user_id)

        changes: dict[str, object] = {}
        if is_active is not None:
            changes["is_active"] = is_active
        if role is not None:
            changes["role"] = role
        updated = self.repository.update_user(user_id, changes)

        self.audit_logger.record(
            "users",
            user_id,
            AuditOperation.UPDATE,
            old_values={"is_active": existing.is_active, "role": existing.role},
            new_values={"is_active": updated.is_active, "role": updated.role},
            user_id=actor.id,
            user_email=actor.email,
            user_role=actor.role,
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
        )
        return updated


def serialize_user(user: UserRecord) -> dict[str, object]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
    }
