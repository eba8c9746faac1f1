"""Domain models for users and request actors."""

from dataclasses import dataclass

ADMIN_ROLE = "admin"
USER_ROLES = ("admin", "manager", "user")


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: str
    name: str | None
    email: str | None
    role: str | None
    is_active: bool = True


@dataclass(frozen=True)
class Actor:
    """Authenticated principal behind a request."""

    id: str
    email: str | None
    role: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


@dataclass(frozen=True)
class RequestMetadata:
    """Network provenance of a request."""

    ip_address: str | None = None
    user_agent: str | None = None
