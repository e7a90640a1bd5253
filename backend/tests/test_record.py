import json
from datetime import datetime, timedelta, timezone

import pytest

from deadman.models import RecordRow
from deadman.schemas.record import (
    Record,
    RecordDecodeError,
    from_query,
    is_overdue,
    parse_json,
    record_from_row,
    record_to_row,
    to_json,
)
from deadman.utils.clock import EPOCH, fixed_clock
from deadman.utils.parsing import Status

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
clock = fixed_clock(NOW)


# --- overdue -----------------------------------------------------------------

def test_not_overdue_without_deadline():
    record = Record(path="/job", ts=NOW - timedelta(days=365))
    assert is_overdue(record, clock) is False


def test_overdue_once_deadline_reached():
    assert is_overdue(Record(path="/job", next=NOW), clock) is True
    assert is_overdue(Record(path="/job", next=NOW - timedelta(seconds=1)), clock) is True
    assert is_overdue(Record(path="/job", next=NOW + timedelta(seconds=1)), clock) is False


def test_overdue_uses_current_time_not_record_ts():
    record = Record(path="/job", ts=NOW + timedelta(hours=5), next=NOW - timedelta(minutes=1))
    assert is_overdue(record, clock) is True


# --- construction from query parameters ---------------------------------------

def test_from_query_defaults():
    record = from_query("/backup/nightly", Status.SUCCESS, {}, clock)
    assert record.id == 0
    assert record.path == "/backup/nightly"
    assert record.status == Status.SUCCESS
    assert record.ts == NOW
    assert record.next is None
    assert record.logs is None


def test_from_query_next_is_relative_to_given_ts():
    params = {"ts": "2024-01-01T00:00:00Z", "next": "15m"}
    record = from_query("/job", Status.SUCCESS, params, clock)
    assert record.ts == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert record.next == datetime(2024, 1, 1, 0, 15, tzinfo=timezone.utc)


def test_from_query_bad_values_fall_back():
    params = {"ts": "yesterday", "next": "2m45s"}
    record = from_query("/job", Status.FAILURE, params, clock)
    assert record.ts == NOW
    assert record.next is None
    assert record.status == Status.FAILURE


def test_from_query_status_overrides_default():
    assert from_query("/job", Status.SUCCESS, {"status": "FAILED"}, clock).status == Status.FAILURE
    assert from_query("/job", Status.FAILURE, {"status": "ok"}, clock).status == Status.SUCCESS
    assert from_query("/job", Status.FAILURE, {"status": ""}, clock).status == Status.SUCCESS


# --- JSON -----------------------------------------------------------------------

def test_json_round_trip():
    record = Record(
        id=7,
        path="/project/job",
        status=Status.FAILURE,
        ts=datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc),
        next=datetime(2024, 5, 1, 13, 0, 0, tzinfo=timezone.utc),
        logs="exit status 1",
    )
    assert parse_json(to_json(record)) == record


def test_json_round_trip_without_optionals():
    record = Record(path="/job", ts=NOW)
    assert parse_json(to_json(record)) == record


def test_json_wire_shape():
    record = Record(id=3, path="/job", ts=NOW, next=NOW + timedelta(minutes=5))
    data = json.loads(to_json(record))
    assert list(data) == ["id", "path", "status", "ts", "next", "logs"]
    assert data["status"] == "success"
    assert data["ts"] == "2024-06-01T12:00:00.000000Z"
    assert data["next"] == "2024-06-01T12:05:00.000000Z"
    assert data["logs"] is None


def test_parse_json_normalizes_offsets_and_status():
    record = parse_json('{"path": "/job", "status": "Job FAILED", "ts": "2024-06-01T14:00:00+02:00"}')
    assert record.status == Status.FAILURE
    assert record.ts == NOW
    assert record.id == 0


@pytest.mark.parametrize("document,field", [
    ("not json", None),
    ("[]", None),
    ('{"ts": "2024-06-01T12:00:00Z"}', "path"),
    ('{"path": "", "ts": "2024-06-01T12:00:00Z"}', "path"),
    ('{"path": "/job", "ts": "yesterday"}', "ts"),
    ('{"path": "/job", "ts": "2024-06-01T12:00:00Z", "next": "soon"}', "next"),
    ('{"path": "/job", "id": "abc"}', "id"),
    ('{"path": "/job", "status": 5}', "status"),
])
def test_parse_json_reports_failing_field(document, field):
    with pytest.raises(RecordDecodeError) as exc_info:
        parse_json(document)
    assert exc_info.value.field == field


# --- rows -----------------------------------------------------------------------

def test_row_mapping_stores_text():
    record = Record(path="/job", status=Status.FAILURE, ts=NOW, next=NOW + timedelta(hours=1), logs="boom")
    row = record_to_row(record)
    assert row.id is None
    assert row.status == "failure"
    assert row.ts == "2024-06-01T12:00:00.000000Z"
    assert row.next == "2024-06-01T13:00:00.000000Z"
    assert row.logs == "boom"


def test_row_mapping_round_trip():
    record = Record(id=12, path="/job", ts=NOW, next=NOW + timedelta(hours=1))
    assert record_from_row(record_to_row(record)) == record


def test_row_with_bad_timestamp_falls_back_to_epoch():
    row = RecordRow(id=1, path="/job", status="FAILED", ts="not a time", next="garbage", logs=None)
    record = record_from_row(row)
    assert record.ts == EPOCH
    assert record.next is None
    assert record.status == Status.FAILURE


def test_row_without_path_is_a_decode_error():
    row = RecordRow(id=1, path=None, status="success", ts="2024-06-01T12:00:00Z")
    with pytest.raises(RecordDecodeError) as exc_info:
        record_from_row(row)
    assert exc_info.value.field == "path"


def test_from_query_out_of_range_ts_falls_back_to_now():
    for ts in ("0001-01-01T00:00:00+01:00", "9999-12-31T23:59:59-01:00"):
        record = from_query("/job", Status.SUCCESS, {"ts": ts, "next": "5m"}, clock)
        assert record.ts == NOW
        assert record.next == NOW + timedelta(minutes=5)


def test_json_round_trip_early_year():
    record = Record(path="/job", ts=datetime(999, 1, 1, tzinfo=timezone.utc))
    assert json.loads(to_json(record))["ts"] == "0999-01-01T00:00:00.000000Z"
    assert parse_json(to_json(record)) == record


def test_row_with_out_of_range_timestamp_falls_back_to_epoch():
    row = RecordRow(id=1, path="/job", status="success", ts="0001-01-01T00:00:00+01:00")
    assert record_from_row(row).ts == EPOCH
