"""Statistics over audit records."""

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

from sisiago.domain.audit import (
    MISSING_VALUE,
    AuditEntry,
    AuditFilters,
    AuditOperation,
    AuditRecord,
)
from sisiago.domain.stats import (
    AuditStats,
    RiskMetrics,
    StatsComparison,
    StatsOptions,
    TableCount,
    TimeBucket,
    TimeRange,
    UserCount,
)
from sisiago.services.audit_query import AuditQueryService, serialize_entry

logger = logging.getLogger(__name__)

STATS_SCAN_LIMIT = 10_000
RECENT_ACTIVITY_LIMIT = 10
HOURLY_BUCKETS = 24
DAILY_BUCKETS = 30
OFF_HOURS_START = 22
OFF_HOURS_END = 6
UNUSUAL_MIN_COUNT = 10
UNUSUAL_FACTOR = 3
SUSPICIOUS_WEIGHT = 10
UNUSUAL_WEIGHT = 15
MAX_RISK_SCORE = 100


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class AuditStatsService:
    """Service computing audit summaries over a time window."""

    query_service: AuditQueryService
    clock: Callable[[], datetime] = field(default=_utcnow)

    def resolve_window(
        self, filters: AuditFilters, time_range: TimeRange | None = None
    ) -> AuditFilters:
        """Apply a named time range to the filters."""
        if time_range is None or time_range.duration is None:
            return filters
        now = self.clock()
        return replace(
            filters, start=now - time_range.duration, end=now, end_exclusive=False
        )

    def compute(
        self,
        filters: AuditFilters,
        options: StatsOptions | None = None,
        time_range: TimeRange | None = None,
    ) -> AuditStats:
        """Return counts by operation, table and user for the window."""
        options = options or StatsOptions()
        window = self.resolve_window(filters, time_range)
        page = self.query_service.fetch_records(window, STATS_SCAN_LIMIT)
        if page.total > len(page.records):
            logger.warning(
                "Audit stats truncated to %s of %s records",
                len(page.records),
                page.total,
            )
        entries = self.query_service.enrich(page.records)
        stats = AuditStats(
            start=window.start,
            end=window.end,
            total_logs=len(entries),
            operation_stats=_count_operations(page.records),
            table_stats=_count_tables(page.records),
            user_stats=_count_users(entries),
            recent_activity=entries[:RECENT_ACTIVITY_LIMIT],
        )
        if options.include_hourly:
            stats.hourly_stats = self._hourly_series(filters)
        if options.include_daily:
            stats.daily_stats = self._daily_series(filters)
        if options.include_risk:
            stats.risk_metrics = compute_risk_metrics(page.records)
        return stats

    def compare_with_previous(
        self,
        filters: AuditFilters,
        time_range: TimeRange | None = None,
        options: StatsOptions | None = None,
    ) -> StatsComparison:
        """Return stats for the window and the equally long window before it."""
        current = self.resolve_window(filters, time_range)
        if current.start is None or current.end is None:
            current = self.resolve_window(filters, TimeRange.LAST_DAY)
        duration = current.end - current.start
        # The boundary instant belongs to the current window only.
        previous = replace(
            current,
            start=current.start - duration,
            end=current.start,
            end_exclusive=True,
        )
        return StatsComparison(
            current=self.compute(current, options),
            previous=self.compute(previous, options),
        )

    def _hourly_series(self, filters: AuditFilters) -> list[TimeBucket]:
        now = self.clock()
        current_hour = now.replace(minute=0, second=0, microsecond=0)
        starts = [
            current_hour - timedelta(hours=offset)
            for offset in range(HOURLY_BUCKETS - 1, -1, -1)
        ]
        return self._series(filters, starts, now, _truncate_hour)

    def _daily_series(self, filters: AuditFilters) -> list[TimeBucket]:
        now = self.clock()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        starts = [
            today - timedelta(days=offset)
            for offset in range(DAILY_BUCKETS - 1, -1, -1)
        ]
        return self._series(filters, starts, now, _truncate_day)

    def _series(
        self,
        filters: AuditFilters,
        starts: list[datetime],
        now: datetime,
        truncate: Callable[[datetime], datetime],
    ) -> list[TimeBucket]:
        window = replace(filters, start=starts[0], end=now, end_exclusive=False)
        page = self.query_service.fetch_records(window, STATS_SCAN_LIMIT)
        counts = Counter(truncate(record.created_at) for record in page.records)
        return [TimeBucket(start=start, count=counts.get(start, 0)) for start in starts]


def compute_risk_metrics(records: list[AuditRecord]) -> RiskMetrics:
    """Score activity volume over a window.

    Suspicious activity is any mutation between 22:00 and 06:00 UTC. An unusual
    pattern is an actor with at least ten mutations and three times the mean
    per-actor volume. Failed logins are not persisted and stay unknown.
    """
    suspicious = sum(1 for record in records if _is_off_hours(record.created_at))
    per_actor = Counter(record.user_id for record in records if record.user_id)
    unusual = 0
    if per_actor:
        mean = sum(per_actor.values()) / len(per_actor)
        unusual = sum(
            1
            for count in per_actor.values()
            if count >= UNUSUAL_MIN_COUNT and count >= UNUSUAL_FACTOR * mean
        )
    score = min(
        MAX_RISK_SCORE, suspicious * SUSPICIOUS_WEIGHT + unusual * UNUSUAL_WEIGHT
    )
    return RiskMetrics(
        suspicious_activities=suspicious,
        unusual_patterns=unusual,
        failed_logins=None,
        risk_score=score,
    )


def empty_stats() -> AuditStats:
    """Zeroed statistics for error responses."""
    return AuditStats(
        start=None,
        end=None,
        total_logs=0,
        operation_stats=_count_operations([]),
        table_stats=[],
        user_stats=[],
    )


def serialize_stats(stats: AuditStats) -> dict[str, object]:
    """Return the flattened wire representation of audit stats."""
    operations = {kind.value: count for kind, count in stats.operation_stats.items()}
    by_user: dict[str, int] = {}
    for user in stats.user_stats:
        label = user.user_email if user.user_email != MISSING_VALUE else user.user_name
        by_user[label] = by_user.get(label, 0) + user.count
    payload: dict[str, object] = {
        "startDate": stats.start.isoformat() if stats.start else None,
        "endDate": stats.end.isoformat() if stats.end else None,
        "totalLogs": stats.total_logs,
        "byOperation": operations,
        "byTable": {table.table_name: table.count for table in stats.table_stats},
        "byUser": by_user,
        "recentActivity": [serialize_entry(entry) for entry in stats.recent_activity],
        "operationStats": operations,
        "tableStats": [
            {"table_name": table.table_name, "count": table.count}
            for table in stats.table_stats
        ],
        "userStats": [
            {
                "user_id": user.user_id,
                "user_name": user.user_name,
                "user_email": user.user_email,
                "count": user.count,
            }
            for user in stats.user_stats
        ],
    }
    if stats.hourly_stats is not None:
        payload["hourlyStats"] = [
            {"hour": bucket.start.isoformat(), "count": bucket.count}
            for bucket in stats.hourly_stats
        ]
    if stats.daily_stats is not None:
        payload["dailyStats"] = [
            {"date": bucket.start.date().isoformat(), "count": bucket.count}
            for bucket in stats.daily_stats
        ]
    if stats.risk_metrics is not None:
        payload["riskMetrics"] = {
            "suspiciousActivities": stats.risk_metrics.suspicious_activities,
            "failedLogins": stats.risk_metrics.failed_logins,
            "unusualPatterns": stats.risk_metrics.unusual_patterns,
            "riskScore": stats.risk_metrics.risk_score,
        }
    return payload


def _count_operations(records: list[AuditRecord]) -> dict[AuditOperation, int]:
    counts = dict.fromkeys(AuditOperation, 0)
    for record in records:
        counts[record.operation] += 1
    return counts


def _count_tables(records: list[AuditRecord]) -> list[TableCount]:
    counts = Counter(record.table_name for record in records)
    return [
        TableCount(table_name=name, count=count) for name, count in counts.most_common()
    ]


def _count_users(entries: list[AuditEntry]) -> list[UserCount]:
    counts: Counter[str | None] = Counter()
    labels: dict[str | None, AuditEntry] = {}
    for entry in entries:
        counts[entry.record.user_id] += 1
        labels.setdefault(entry.record.user_id, entry)
    return [
        UserCount(
            user_id=user_id,
            user_name=labels[user_id].user_name,
            user_email=labels[user_id].user_email,
            count=count,
        )
        for user_id, count in counts.most_common()
    ]


def _is_off_hours(moment: datetime) -> bool:
    hour = moment.astimezone(UTC).hour
    return hour >= OFF_HOURS_START or hour < OFF_HOURS_END


def _truncate_hour(moment: datetime) -> datetime:
    return moment.astimezone(UTC).replace(minute=0, second=0, microsecond=0)


def _truncate_day(moment: datetime) -> datetime:
    return moment.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
