"""Supabase repository for users."""

from dataclasses import dataclass

from supabase import Client

from sisiago.domain.users import UserRecord
from sisiago.services.users import UserNotFoundError, UserRepository

_USER_COLUMNS = "id, name, email, role, is_active"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation of user lookups and updates."""

    client: Client

    def get_user(self, user_id: str) -> UserRecord | None:
        """Return a user by id."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def get_users(self, user_ids: set[str]) -> dict[str, UserRecord]:
        """Return users for the given ids."""
        if not user_ids:
            return {}
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .in_("id", sorted(user_ids))
            .execute()
        )
        users = [_parse_user(row) for row in response.data or []]
        return {user.id: user for user in users}

    def update_user(self, user_id: str, changes: dict[str, object]) -> UserRecord:
        """Apply changes to a user row."""
        response = (
            self.client.table("users").update(changes).eq("id", user_id).execute()
        )
        if not response.data:
            raise UserNotFoundError(user_id)
        return _parse_user(response.data[0])


def _parse_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=str(row["id"]),
        name=row.get("name"),
        email=row.get("email"),
        role=row.get("role"),
        is_active=bool(row.get("is_active", True)),
    )
