"""Domain models for audit statistics."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum

from sisiago.domain.audit import AuditEntry, AuditOperation


class TimeRange(StrEnum):
    """Named statistics windows ending now."""

    LAST_HOUR = "1h"
    LAST_DAY = "24h"
    LAST_WEEK = "7d"
    LAST_MONTH = "30d"
    CUSTOM = "custom"

    @property
    def duration(self) -> timedelta | None:
        return _DURATIONS.get(self)


_DURATIONS = {
    TimeRange.LAST_HOUR: timedelta(hours=1),
    TimeRange.LAST_DAY: timedelta(days=1),
    TimeRange.LAST_WEEK: timedelta(days=7),
    TimeRange.LAST_MONTH: timedelta(days=30),
}


@dataclass(frozen=True)
class StatsOptions:
    """Opt-in extras for a statistics computation."""

    include_hourly: bool = False
    include_daily: bool = False
    include_risk: bool = False


@dataclass(frozen=True)
class TableCount:
    table_name: str
    count: int


@dataclass(frozen=True)
class UserCount:
    user_id: str | None
    user_name: str
    user_email: str
    count: int


@dataclass(frozen=True)
class TimeBucket:
    """Record count for one hour or one day."""

    start: datetime
    count: int


@dataclass(frozen=True)
class RiskMetrics:
    """Activity-volume heuristics over a statistics window."""

    suspicious_activities: int
    unusual_patterns: int
    failed_logins: int | None
    risk_score: int


@dataclass
class AuditStats:
    """Summary statistics over a window of audit records."""

    start: datetime | None
    end: datetime | None
    total_logs: int
    operation_stats: dict[AuditOperation, int]
    table_stats: list[TableCount]
    user_stats: list[UserCount]
    recent_activity: list[AuditEntry] = field(default_factory=list)
    hourly_stats: list[TimeBucket] | None = None
    daily_stats: list[TimeBucket] | None = None
    risk_metrics: RiskMetrics | None = None


@dataclass(frozen=True)
class StatsComparison:
    """Statistics for a window and the window of equal length before it."""

    current: AuditStats
    previous: AuditStats
