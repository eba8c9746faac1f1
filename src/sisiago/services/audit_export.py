"""CSV and JSON renderings of audit entries."""

import csv
import io
import json

from sisiago.domain.audit import AuditEntry

CSV_HEADER = [
    "id",
    "timestamp",
    "user_name",
    "user_email",
    "user_role",
    "table_name",
    "operation",
    "record_id",
    "ip_address",
    "user_agent",
    "old_values",
    "new_values",
]


def render_csv(entries: list[AuditEntry]) -> str:
    """Render entries as CSV with a header row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        record = entry.record
        writer.writerow(
            [
                record.id,
                record.created_at.isoformat(),
                entry.user_name,
                entry.user_email,
                entry.user_role,
                record.table_name,
                record.operation.value,
                record.record_id,
                record.ip_address or "",
                record.user_agent or "",
                _snapshot_text(record.old_values),
                _snapshot_text(record.new_values),
            ]
        )
    return buf.getvalue()


def render_json(rows: list[dict[str, object]]) -> str:
    """Render serialized entries as a pretty-printed JSON array."""
    return json.dumps(rows, ensure_ascii=False, indent=2)


def _snapshot_text(values: dict[str, object] | None) -> str:
    if values is None:
        return ""
    return json.dumps(values, ensure_ascii=False, default=str)
