"""Domain models for audit records."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import StrEnum

SYSTEM_ACTOR_NAME = "Sistema"
MISSING_VALUE = "N/A"

_END_OF_DAY = time(23, 59, 59, 999000)


class InvalidFilterError(ValueError):
    """Raised when an audit filter value cannot be interpreted."""


class AuditOperation(StrEnum):
    """Kind of mutation an audit record describes."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, raw: "str | AuditOperation") -> "AuditOperation":
        """Parse an operation name, accepting the legacy INSERT spelling."""
        if isinstance(raw, AuditOperation):
            return raw
        value = raw.strip().upper()
        if value == "INSERT":
            return cls.CREATE
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidFilterError(f"Unknown operation: {raw!r}") from exc


@dataclass(frozen=True)
class AuditRecord:
    """One observed mutation. Never modified after it is written."""

    id: str
    table_name: str
    record_id: str
    operation: AuditOperation
    created_at: datetime
    old_values: dict[str, object] | None = None
    new_values: dict[str, object] | None = None
    user_id: str | None = None
    user_email: str | None = None
    user_role: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuditEntry:
    """Audit record enriched with the actor as currently known."""

    record: AuditRecord
    user_name: str
    user_email: str
    user_role: str


@dataclass(frozen=True)
class AuditFilters:
    """Conjunctive filter set over audit records."""

    table_name: str | None = None
    operation: AuditOperation | None = None
    user_id: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    end_exclusive: bool = False

    def matches(self, record: AuditRecord) -> bool:
        """Return whether the record satisfies every populated field."""
        if self.table_name and record.table_name != self.table_name:
            return False
        if self.operation and record.operation != self.operation:
            return False
        if self.user_id and record.user_id != self.user_id:
            return False
        if self.start and record.created_at < self.start:
            return False
        if self.end is None:
            return True
        if self.end_exclusive:
            return record.created_at < self.end
        return record.created_at <= self.end


@dataclass(frozen=True)
class AuditPage:
    """A page of audit records plus the size of the full result set."""

    records: list[AuditRecord]
    total: int


@dataclass(frozen=True)
class Pagination:
    """Pagination envelope for audit listings."""

    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


def parse_date_bound(raw: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse a date filter.

    A bare calendar date expands to the first or last millisecond of that UTC
    day. A full timestamp is used as given, with naive values read as UTC.
    """
    if raw is None or not raw.strip():
        return None
    value = raw.strip()
    day = _parse_day(value)
    if day is not None:
        return datetime.combine(
            day, _END_OF_DAY if end_of_day else time.min, tzinfo=UTC
        )
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise InvalidFilterError(f"Invalid date: {raw!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_day(value: str) -> date | None:
    # Any date-only form, including the basic 20240510 spelling.
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_filters(  # noqa: PLR0913
    *,
    table_name: str | None = None,
    operation: str | None = None,
    user_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> AuditFilters:
    """Build filters from raw request values."""
    start = parse_date_bound(start_date)
    end = parse_date_bound(end_date, end_of_day=True)
    if start and end and start > end:
        raise InvalidFilterError("start_date must not be after end_date")
    return AuditFilters(
        table_name=table_name or None,
        operation=AuditOperation.parse(operation) if operation else None,
        user_id=user_id or None,
        start=start,
        end=end,
    )
