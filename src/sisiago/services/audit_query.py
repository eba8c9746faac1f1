"""Read path for audit records: listing, enrichment and export."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from sisiago.domain.audit import (
    MISSING_VALUE,
    SYSTEM_ACTOR_NAME,
    AuditEntry,
    AuditFilters,
    AuditPage,
    AuditRecord,
    InvalidFilterError,
    Pagination,
)
from sisiago.domain.users import UserRecord
from sisiago.services.audit import AuditRepository
from sisiago.services.audit_export import render_csv, render_json

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100
EXPORT_LIMIT = 10_000


class ExportFormat(StrEnum):
    CSV = "csv"
    JSON = "json"


class UserDirectory(Protocol):
    """Lookup of current user details for actor enrichment."""

    def get_users(self, user_ids: set[str]) -> dict[str, UserRecord]:
        """Return known users keyed by id."""


@dataclass
class AuditListing:
    """One page of enriched audit entries."""

    entries: list[AuditEntry]
    pagination: Pagination


@dataclass
class AuditQueryService:
    """Service for filtered, paginated audit retrieval."""

    repository: AuditRepository
    user_directory: UserDirectory

    def list(
        self, filters: AuditFilters, limit: int | None = None, offset: int = 0
    ) -> AuditListing:
        """Return a page of entries ordered newest first."""
        page_size = clamp_page_size(limit)
        if offset < 0:
            raise InvalidFilterError("offset must not be negative")
        page = self.fetch_records(filters, page_size, offset)
        return AuditListing(
            entries=self.enrich(page.records),
            pagination=Pagination(total=page.total, limit=page_size, offset=offset),
        )

    def export(self, filters: AuditFilters, export_format: ExportFormat) -> str:
        """Render every matching entry, up to the export limit."""
        page = self.fetch_records(filters, EXPORT_LIMIT, 0)
        entries = self.enrich(page.records)
        if export_format is ExportFormat.CSV:
            return render_csv(entries)
        return render_json([serialize_entry(entry) for entry in entries])

    def fetch_records(
        self, filters: AuditFilters, limit: int, offset: int = 0
    ) -> AuditPage:
        """Return raw records without the page size clamp."""
        return self.repository.list_records(filters, limit, offset)

    def enrich(self, records: Iterable[AuditRecord]) -> list[AuditEntry]:
        """Attach actor display fields resolved from the user directory."""
        records = list(records)
        user_ids = {record.user_id for record in records if record.user_id}
        users = self.user_directory.get_users(user_ids) if user_ids else {}
        return [
            _enrich_record(record, users.get(record.user_id or ""))
            for record in records
        ]


def clamp_page_size(limit: int | None) -> int:
    """Apply the default page size and the upper bound."""
    if limit is None:
        return DEFAULT_PAGE_SIZE
    if limit < 1:
        raise InvalidFilterError("limit must be positive")
    return min(limit, MAX_PAGE_SIZE)


def serialize_entry(entry: AuditEntry) -> dict[str, object]:
    """Return the wire representation of an enriched audit entry."""
    record = entry.record
    return {
        "id": record.id,
        "table_name": record.table_name,
        "record_id": record.record_id,
        "operation": record.operation.value,
        "old_values": record.old_values,
        "new_values": record.new_values,
        "user_id": record.user_id,
        "user_name": entry.user_name,
        "user_email": entry.user_email,
        "user_role": entry.user_role,
        "ip_address": record.ip_address,
        "user_agent": record.user_agent,
        "created_at": record.created_at.isoformat(),
    }


def serialize_pagination(pagination: Pagination) -> dict[str, object]:
    return {
        "total": pagination.total,
        "limit": pagination.limit,
        "offset": pagination.offset,
        "hasMore": pagination.has_more,
    }


def _enrich_record(record: AuditRecord, user: UserRecord | None) -> AuditEntry:
    if user is None:
        return AuditEntry(
            record=record,
            user_name=SYSTEM_ACTOR_NAME,
            user_email=record.user_email or MISSING_VALUE,
            user_role=record.user_role or MISSING_VALUE,
        )
    return AuditEntry(
        record=record,
        user_name=user.name or SYSTEM_ACTOR_NAME,
        user_email=user.email or record.user_email or MISSING_VALUE,
        user_role=user.role or record.user_role or MISSING_VALUE,
    )
