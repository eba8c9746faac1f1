"""Audit logging service."""

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from sisiago.domain.audit import (
    AuditFilters,
    AuditOperation,
    AuditPage,
    AuditRecord,
    InvalidFilterError,
)

logger = logging.getLogger(__name__)


class AuditRepository(Protocol):
    """Persistence interface for audit records."""

    def insert_record(self, record: AuditRecord) -> None:
        """Append an audit record."""

    def list_records(
        self, filters: AuditFilters, limit: int, offset: int
    ) -> AuditPage:
        """Return matching records newest first, with the total match count."""


@dataclass
class AuditLogger:
    """Records mutations without ever failing the caller.

    Writes happen after the business mutation has committed and are not part
    of its transaction. A failed write is logged and dropped.
    """

    repository: AuditRepository
    max_attempts: int = 1
    retry_backoff_seconds: float = 0.1

    def record(  # noqa: PLR0913
        self,
        table_name: str,
        record_id: str,
        operation: AuditOperation | str,
        *,
        old_values: dict[str, object] | None = None,
        new_values: dict[str, object] | None = None,
        user_id: str | None = None,
        user_email: str | None = None,
        user_role: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Persist an audit record for a committed mutation."""
        if not table_name or not record_id:
            logger.warning(
                "Dropping audit event with empty table or record id: %r/%r",
                table_name,
                record_id,
            )
            return
        try:
            kind = AuditOperation.parse(operation)
        except InvalidFilterError:
            logger.warning("Dropping audit event with unknown operation %r", operation)
            return
        record = AuditRecord(
            id=str(uuid4()),
            table_name=table_name,
            record_id=str(record_id),
            operation=kind,
            created_at=datetime.now(tz=UTC),
            old_values=old_values,
            new_values=new_values,
            user_id=user_id,
            user_email=user_email,
            user_role=user_role,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._write(record)

    def _write(self, record: AuditRecord) -> None:
        attempts = max(self.max_attempts, 1)
        for attempt in range(1, attempts + 1):
            try:
                self.repository.insert_record(record)
            except Exception:
                if attempt < attempts:
                    logger.warning(
                        "Audit write attempt %s/%s failed, retrying", attempt, attempts
                    )
                    time.sleep(self.retry_backoff_seconds * 2 ** (attempt - 1))
                    continue
                logger.exception(
                    "Failed to record audit event %s %s/%s",
                    record.operation,
                    record.table_name,
                    record.record_id,
                )
                return
            logger.info(
                "Audit event %s %s/%s by %s",
                record.operation,
                record.table_name,
                record.record_id,
                record.user_id or "system",
            )
            return
