from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from scanboard.core.envelope import INVALID_ENTITY_PERCENT, Envelope, Status
from scanboard.core.validator import RecordValidator, default_validator
from scanboard.db.schemas import KeyMarker, RepositoryRecord, ScanResult


def test_bare_success_envelope_omits_data():
    env = Envelope.ok()
    assert env.succeeded is True
    assert env.status is Status.SUCCESS
    assert env.to_dict() == {"status": "success"}


def test_empty_payload_is_kept():
    assert Envelope.ok([]).to_dict() == {"status": "success", "data": []}


def test_failure_envelope_carries_message():
    env = Envelope.fail("entity not found")
    assert env.succeeded is False
    assert env.message == "entity not found"
    assert env.to_dict() == {"status": "failure", "data": "entity not found"}


def test_success_envelope_has_no_message():
    assert Envelope.ok("payload").message is None


def test_key_marker_parse_and_encode():
    marker = KeyMarker.parse("AWS_SECRET|src/settings.py")
    assert marker == KeyMarker("AWS_SECRET", "src/settings.py")
    assert marker.encode() == "AWS_SECRET|src/settings.py"
    bare = KeyMarker.parse("GITHUB_TOKEN")
    assert bare.path is None
    assert bare.encode() == "GITHUB_TOKEN"


def test_missing_must_keys_in_declared_order():
    scan = ScanResult(percent=50, keys_found=["B|x.py", "D"], must_keys=["A", "B", "C", "D"])
    assert scan.missing_must_keys() == ["A", "C"]


def test_record_accepts_legacy_data_key_and_dumps_scan():
    record = RepositoryRecord.model_validate({"repo_name": "r", "data": {"percent": 12}})
    assert record.percent == 12.0
    document = record.to_document()
    assert "scan" in document and "data" not in document


def test_naive_timestamps_are_read_as_utc():
    record = RepositoryRecord.model_validate(
        {"repo_name": "r", "scan": {"percent": 1}, "created": "2023-04-15T10:30:00"}
    )
    assert record.created == datetime(2023, 4, 15, 10, 30, tzinfo=timezone.utc)


def test_offset_timestamps_are_converted_to_utc():
    record = RepositoryRecord.model_validate(
        {"repo_name": "r", "scan": {"percent": 1}, "updated": "2023-04-15T12:30:00+02:00"}
    )
    assert record.updated == datetime(2023, 4, 15, 10, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("bad_percent", ["70", True, None, float("nan"), float("inf"), [70]])
def test_non_numeric_percent_is_rejected(record_factory, bad_percent):
    env = default_validator().validate(record_factory("r", bad_percent))
    assert env.to_dict() == {"status": "failure", "data": INVALID_ENTITY_PERCENT}


def test_missing_percent_is_rejected():
    env = default_validator().validate({"repo_name": "r", "scan": {"links": []}})
    assert env.message == INVALID_ENTITY_PERCENT


def test_integer_percent_is_accepted(record_factory):
    assert default_validator().validate(record_factory("r", 70)).succeeded


def test_non_object_record_is_rejected():
    env = default_validator().validate(42)
    assert env.message == "invalid entity, record must be an object"


def test_other_schema_problems_name_the_field():
    env = default_validator().validate({"repo_name": "r", "scan": {"percent": 1, "links": "nope"}})
    assert env.message.startswith("invalid entity, scan.links")


def test_blank_repo_name_rule(record_factory):
    env = default_validator().validate(record_factory("   ", 10))
    assert env.message == "invalid entity, repo_name is empty"


def test_extra_rules_run_after_parsing(record_factory):
    def cap_percent(record):
        return "percent above 100" if record.percent > 100 else None

    validator = RecordValidator(rules=[cap_percent])
    assert validator.validate(record_factory("r", 100)).succeeded
    assert validator.validate(record_factory("r", 101)).message == "percent above 100"


def test_coerce_raises_for_unparseable_values():
    with pytest.raises(ValidationError):
        RepositoryRecord.coerce({"repo_name": "r"})
