"""Audit log API endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response

from sisiago.api.auth import require_admin
from sisiago.domain.audit import AuditFilters, InvalidFilterError, parse_filters
from sisiago.domain.stats import StatsOptions, TimeRange
from sisiago.services.audit_query import (
    DEFAULT_PAGE_SIZE,
    ExportFormat,
    serialize_entry,
    serialize_pagination,
)
from sisiago.services.audit_stats import empty_stats, serialize_stats

if TYPE_CHECKING:
    from sisiago.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/audit-logs", tags=["audit"], dependencies=[Depends(require_admin)]
)

_MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.JSON: "application/json",
}


def audit_filters(  # noqa: PLR0913
    table_name: str | None = None,
    operation: str | None = None,
    user_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> AuditFilters:
    """Parse the shared filter query parameters."""
    return parse_filters(
        table_name=table_name,
        operation=operation,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )


def stats_options(
    include_hourly: bool = False,
    include_daily: bool = False,
    include_risk: bool = False,
) -> StatsOptions:
    return StatsOptions(
        include_hourly=include_hourly,
        include_daily=include_daily,
        include_risk=include_risk,
    )


@router.get("", response_model=None)
async def list_audit_logs(
    request: Request,
    filters: AuditFilters = Depends(audit_filters),
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> Response | dict[str, object]:
    """Return a page of audit records, newest first."""
    container: AppContainer = request.app.state.container
    try:
        listing = container.audit_query_service.list(filters, limit, offset)
    except InvalidFilterError:
        raise
    except Exception:
        logger.exception("Failed to list audit logs")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Failed to load audit logs",
                "data": [],
                "pagination": {
                    "total": 0,
                    "limit": limit,
                    "offset": offset,
                    "hasMore": False,
                },
            },
        )
    return {
        "success": True,
        "data": [serialize_entry(entry) for entry in listing.entries],
        "pagination": serialize_pagination(listing.pagination),
    }


@router.get("/stats", response_model=None)
async def audit_stats(
    request: Request,
    filters: AuditFilters = Depends(audit_filters),
    options: StatsOptions = Depends(stats_options),
    time_range: TimeRange | None = None,
) -> Response | dict[str, object]:
    """Return audit statistics for the requested window."""
    container: AppContainer = request.app.state.container
    try:
        stats = container.audit_stats_service.compute(filters, options, time_range)
    except Exception:
        logger.exception("Failed to compute audit stats")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to load audit statistics"}
            | serialize_stats(empty_stats()),
        )
    return serialize_stats(stats)


@router.get("/stats/compare", response_model=None)
async def compare_audit_stats(
    request: Request,
    filters: AuditFilters = Depends(audit_filters),
    time_range: TimeRange | None = None,
) -> Response | dict[str, object]:
    """Return statistics for the window and the preceding window."""
    container: AppContainer = request.app.state.container
    try:
        comparison = container.audit_stats_service.compare_with_previous(
            filters, time_range
        )
    except Exception:
        logger.exception("Failed to compare audit stats")
        empty = serialize_stats(empty_stats())
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to compare audit statistics",
                "current": empty,
                "previous": empty,
            },
        )
    return {
        "current": serialize_stats(comparison.current),
        "previous": serialize_stats(comparison.previous),
    }


@router.get("/export", response_model=None)
async def export_audit_logs(
    request: Request,
    filters: AuditFilters = Depends(audit_filters),
    export_format: ExportFormat = Query(default=ExportFormat.CSV, alias="format"),
) -> Response:
    """Download every matching record as CSV or JSON."""
    container: AppContainer = request.app.state.container
    try:
        content = container.audit_query_service.export(filters, export_format)
    except Exception:
        logger.exception("Failed to export audit logs")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to export audit logs"},
        )
    stamp = datetime.now(tz=UTC).strftime("%Y%m%d-%H%M%S")
    filename = f"audit-logs-{stamp}.{export_format.value}"
    return Response(
        content=content,
        media_type=_MEDIA_TYPES[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
