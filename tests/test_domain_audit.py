"""Tests for audit domain parsing."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from sisiago.domain.audit import (
    AuditOperation,
    InvalidFilterError,
    parse_date_bound,
    parse_filters,
)
from tests.conftest import make_record


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("CREATE", AuditOperation.CREATE),
        ("insert", AuditOperation.CREATE),
        (" update ", AuditOperation.UPDATE),
        ("DELETE", AuditOperation.DELETE),
    ],
)
def test_operation_parse(raw: str, expected: AuditOperation) -> None:
    assert AuditOperation.parse(raw) is expected


def test_operation_parse_rejects_unknown() -> None:
    with pytest.raises(InvalidFilterError):
        AuditOperation.parse("UPSERT")


def test_calendar_dates_expand_to_day_bounds() -> None:
    start = parse_date_bound("2024-05-10")
    end = parse_date_bound("2024-05-10", end_of_day=True)

    assert start == datetime(2024, 5, 10, tzinfo=UTC)
    assert end == datetime(2024, 5, 10, 23, 59, 59, 999000, tzinfo=UTC)


def test_timestamps_are_kept() -> None:
    aware = parse_date_bound("2024-05-10T08:15:00-03:00")
    naive = parse_date_bound("2024-05-10T08:15:00")

    assert aware == datetime(2024, 5, 10, 8, 15, tzinfo=timezone(timedelta(hours=-3)))
    assert naive == datetime(2024, 5, 10, 8, 15, tzinfo=UTC)


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_blank_dates_are_ignored(raw: str | None) -> None:
    assert parse_date_bound(raw) is None


@pytest.mark.parametrize("raw", ["yesterday", "2024-02-30", "10/05/2024"])
def test_malformed_dates_are_rejected(raw: str) -> None:
    with pytest.raises(InvalidFilterError):
        parse_date_bound(raw)


def test_parse_filters_drops_empty_values() -> None:
    filters = parse_filters(table_name="", operation="", user_id="u1")

    assert filters.table_name is None
    assert filters.operation is None
    assert filters.user_id == "u1"


def test_parse_filters_rejects_inverted_range() -> None:
    with pytest.raises(InvalidFilterError):
        parse_filters(start_date="2024-05-11", end_date="2024-05-10")


def test_basic_calendar_dates_cover_the_whole_day() -> None:
    filters = parse_filters(start_date="20240510", end_date="20240510")
    record = make_record(created_at=datetime(2024, 5, 10, 12, tzinfo=UTC))

    assert filters.start == datetime(2024, 5, 10, tzinfo=UTC)
    assert filters.end == datetime(2024, 5, 10, 23, 59, 59, 999000, tzinfo=UTC)
    assert filters.matches(record)
