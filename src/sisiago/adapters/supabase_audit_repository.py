"""Supabase repository for audit records."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from sisiago.domain.audit import AuditFilters, AuditOperation, AuditPage, AuditRecord
from sisiago.services.audit import AuditRepository

AUDIT_TABLE = "audit_logs"


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed audit repository."""

    client: Client

    def insert_record(self, record: AuditRecord) -> None:
        """Insert an audit record row."""
        self.client.table(AUDIT_TABLE).insert(
            {
                "id": record.id,
                "table_name": record.table_name,
                "record_id": record.record_id,
                "operation": record.operation.value,
                "old_values": record.old_values,
                "new_values": record.new_values,
                "user_id": record.user_id,
                "user_email": record.user_email,
                "user_role": record.user_role,
                "ip_address": record.ip_address,
                "user_agent": record.user_agent,
                "created_at": record.created_at.isoformat(),
            }
        ).execute()

    def list_records(
        self, filters: AuditFilters, limit: int, offset: int
    ) -> AuditPage:
        """Return a page of matching records, newest first."""
        query = self.client.table(AUDIT_TABLE).select("*", count="exact")
        if filters.table_name:
            query = query.eq("table_name", filters.table_name)
        if filters.operation is AuditOperation.CREATE:
            # Older rows spell creation as INSERT.
            query = query.in_("operation", ["CREATE", "INSERT"])
        elif filters.operation:
            query = query.eq("operation", filters.operation.value)
        if filters.user_id:
            query = query.eq("user_id", filters.user_id)
        if filters.start:
            query = query.gte("created_at", filters.start.isoformat())
        if filters.end and filters.end_exclusive:
            query = query.lt("created_at", filters.end.isoformat())
        elif filters.end:
            query = query.lte("created_at", filters.end.isoformat())
        response = (
            query.order("created_at", desc=True)
            .order("id", desc=True)
            .range(offset, offset + limit - 1)
            .execute()
        )
        rows = response.data or []
        total = response.count if response.count is not None else offset + len(rows)
        return AuditPage(records=[_parse_row(row) for row in rows], total=total)


def _parse_row(row: dict[str, object]) -> AuditRecord:
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return AuditRecord(
        id=str(row["id"]),
        table_name=str(row.get("table_name", "")),
        record_id=str(row.get("record_id", "")),
        operation=AuditOperation.parse(str(row.get("operation", ""))),
        created_at=created_at,
        old_values=_snapshot(row.get("old_values")),
        new_values=_snapshot(row.get("new_values")),
        user_id=_optional_str(row.get("user_id")),
        user_email=_optional_str(row.get("user_email")),
        user_role=_optional_str(row.get("user_role")),
        ip_address=_optional_str(row.get("ip_address")),
        user_agent=_optional_str(row.get("user_agent")),
    )


def _snapshot(value: object) -> dict[str, object] | None:
    return value if isinstance(value, dict) else None


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None
