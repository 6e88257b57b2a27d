"""
Record validation for repository inserts.

The validator is the single authority on whether a record may be inserted.
It reports through the same envelope shape as the repositories so callers can
propagate its verdict unchanged.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional, Protocol, Sequence

from pydantic import ValidationError

from scanboard.core.envelope import INVALID_ENTITY_PERCENT, Envelope
from scanboard.db.schemas import RepositoryRecord

Rule = Callable[[RepositoryRecord], Optional[str]]


class Validator(Protocol):
    def validate(self, record: Any) -> Envelope:
        ...


def describe_validation_error(exc: ValidationError) -> str:
    """Collapse a pydantic error into the single message clients display."""
    errors = exc.errors()
    for err in errors:
        loc = tuple(err.get("loc", ()))
        if loc and loc[-1] == "percent":
            return INVALID_ENTITY_PERCENT
    if not errors:
        return "invalid entity"
    first = errors[0]
    path = ".".join(str(part) for part in first.get("loc", ())) or "record"
    return f"invalid entity, {path}: {first.get('msg', 'invalid value')}"


class RecordValidator:
    """Parse-and-check validator with optional extra rules.

    Each rule receives the parsed record and returns an error message or None.
    """

    def __init__(self, rules: Sequence[Rule] = ()):
        self.rules = list(rules)

    def validate(self, record: Any) -> Envelope:
        if not isinstance(record, (RepositoryRecord, Mapping)):
            return Envelope.fail("invalid entity, record must be an object")
        try:
            parsed = RepositoryRecord.coerce(record)
        except ValidationError as exc:
            return Envelope.fail(describe_validation_error(exc))
        for rule in self.rules:
            message = rule(parsed)
            if message:
                return Envelope.fail(message)
        return Envelope.ok()


def require_repo_name(record: RepositoryRecord) -> Optional[str]:
    if not record.repo_name.strip():
        return "invalid entity, repo_name is empty"
    return None


def default_validator() -> RecordValidator:
    return RecordValidator(rules=[require_repo_name])
