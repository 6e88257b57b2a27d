"""
SQL-backed repository of scan records.

Same envelope contract as the in-memory repository, scoped to one partition and
one owner. Every mutation is a single transaction; replace/delete guard their
write with the fingerprint they matched so a concurrent change turns into
"entity not found" instead of a double write. Storage errors are rolled back,
logged, and reported as a failure envelope.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from scanboard.core import ordering
from scanboard.core.envelope import DUPLICATE_REPO_NAME, ENTITY_NOT_FOUND, STORAGE_ERROR, Envelope
from scanboard.core.fingerprint import fingerprint
from scanboard.core.validator import Validator, default_validator
from scanboard.db import models
from scanboard.db.schemas import RepositoryRecord

logger = logging.getLogger(__name__)


def _column_values(record: RepositoryRecord) -> Dict[str, Any]:
    return {
        "repo_name": record.repo_name,
        "fingerprint": fingerprint(record),
        "document": record.to_document(),
        "percent": record.scan.percent,
        "created": record.created,
        "updated": record.updated,
        "found": record.found,
    }


def _to_record(row: models.ScanRecord) -> RepositoryRecord:
    return RepositoryRecord.model_validate(row.document)


class SqlRepository:
    def __init__(
        self,
        db: Session,
        partition: str,
        owner_id: Optional[uuid.UUID] = None,
        validator: Optional[Validator] = None,
    ):
        self.db = db
        self.partition = partition
        self.owner_id = owner_id
        self.validator = validator if validator is not None else default_validator()

    def _criteria(self) -> list:
        owner = models.ScanRecord.owner_user_id
        return [
            models.ScanRecord.partition == self.partition,
            owner.is_(None) if self.owner_id is None else owner == self.owner_id,
        ]

    def _scoped(self):
        return self.db.query(models.ScanRecord).filter(*self._criteria())

    def _storage_failure(self, operation: str) -> Envelope:
        self.db.rollback()
        logger.exception("storage_failure: op=%s partition=%s", operation, self.partition)
        return Envelope.fail(STORAGE_ERROR)

    def _first_match(self, target: str) -> Optional[models.ScanRecord]:
        return (
            self._scoped()
            .filter(models.ScanRecord.fingerprint == target)
            .order_by(models.ScanRecord.id.asc())
            .with_for_update()
            .first()
        )

    def get_all(self) -> Envelope:
        try:
            rows = self._scoped().order_by(models.ScanRecord.id.asc()).all()
        except SQLAlchemyError:
            return self._storage_failure("get_all")
        return Envelope.ok([_to_record(row) for row in rows])

    def insert(self, record: Any) -> Envelope:
        status = self.validator.validate(record)
        if not status.succeeded:
            return status
        parsed = RepositoryRecord.coerce(record)
        row = models.ScanRecord(partition=self.partition, owner_user_id=self.owner_id, **_column_values(parsed))
        try:
            self.db.add(row)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return Envelope.fail(DUPLICATE_REPO_NAME)
        except SQLAlchemyError:
            return self._storage_failure("insert")
        return Envelope.ok()

    def replace(self, record: Any, new_record: Any) -> Envelope:
        target = fingerprint(record)
        try:
            row = self._first_match(target)
            if row is None:
                self.db.rollback()
                return Envelope.fail(ENTITY_NOT_FOUND)
            status = self.validator.validate(new_record)
            if not status.succeeded:
                self.db.rollback()
                return status
            parsed = RepositoryRecord.coerce(new_record)
            updated = (
                self._scoped()
                .filter(models.ScanRecord.id == row.id, models.ScanRecord.fingerprint == target)
                .update(_column_values(parsed), synchronize_session=False)
            )
            if updated != 1:
                self.db.rollback()
                return Envelope.fail(ENTITY_NOT_FOUND)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return Envelope.fail(DUPLICATE_REPO_NAME)
        except SQLAlchemyError:
            return self._storage_failure("replace")
        return Envelope.ok()

    def delete(self, record: Any) -> Envelope:
        target = fingerprint(record)
        try:
            row = self._first_match(target)
            if row is None:
                self.db.rollback()
                return Envelope.fail(ENTITY_NOT_FOUND)
            deleted = (
                self._scoped()
                .filter(models.ScanRecord.id == row.id, models.ScanRecord.fingerprint == target)
                .delete(synchronize_session=False)
            )
            if deleted != 1:
                self.db.rollback()
                return Envelope.fail(ENTITY_NOT_FOUND)
            self.db.commit()
        except SQLAlchemyError:
            return self._storage_failure("delete")
        return Envelope.ok()

    def sort(self, order: Optional[str] = ordering.DEFAULT_ORDER, field: Optional[str] = ordering.DEFAULT_FIELD) -> Envelope:
        error = ordering.sort_argument_error(order, field)
        if error is not None:
            return error
        order = ordering.DEFAULT_ORDER if order is None else order
        field = ordering.DEFAULT_FIELD if field is None else field
        column = getattr(models.ScanRecord, field)
        clauses = []
        if field in ordering.TIMESTAMP_FIELDS:
            # Missing timestamps sort as the earliest value on every dialect
            clauses.append(column.is_(None).asc() if order == "desc" else column.is_(None).desc())
        clauses.append(column.desc() if order == "desc" else column.asc())
        clauses.append(models.ScanRecord.id.asc())
        try:
            rows = self._scoped().order_by(*clauses).all()
        except SQLAlchemyError:
            return self._storage_failure("sort")
        return Envelope.ok([_to_record(row) for row in rows])

    def filter(self, min_percent: Any) -> Envelope:
        error = ordering.threshold_error(min_percent)
        if error is not None:
            return error
        try:
            rows = (
                self._scoped()
                .filter(models.ScanRecord.percent >= min_percent)
                .order_by(models.ScanRecord.id.asc())
                .all()
            )
        except SQLAlchemyError:
            return self._storage_failure("filter")
        return Envelope.ok([_to_record(row) for row in rows])

    def get_page(self, page: int = 1, limit: int = 10) -> Envelope:
        error = ordering.page_error(page, limit)
        if error is not None:
            return error
        try:
            total = self._scoped().count()
            rows = (
                self._scoped()
                .order_by(models.ScanRecord.id.asc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError:
            return self._storage_failure("get_page")
        return Envelope.ok(ordering.page_payload([_to_record(row) for row in rows], total, limit))

    def stats(self) -> Envelope:
        record = models.ScanRecord
        try:
            total, analyzed, highest, lowest, average = (
                self.db.query(
                    func.count(record.id),
                    func.count(record.found),
                    func.max(record.percent),
                    func.min(record.percent),
                    func.avg(record.percent),
                )
                .filter(*self._criteria())
                .one()
            )
        except SQLAlchemyError:
            return self._storage_failure("stats")
        if not total:
            return Envelope.ok(ordering.build_summary(0, 0, None, None, None))
        return Envelope.ok(
            ordering.build_summary(
                total=int(total),
                analyzed=int(analyzed),
                highest=float(highest),
                lowest=float(lowest),
                average=float(average),
            )
        )


class SqlPartitionDirectory:
    """Partition names backed by the scan_records table; opens one repository per request."""

    def __init__(self, names: Iterable[str], validator_factory: Callable[[], Validator] = default_validator):
        self._names: List[str] = list(names)
        self._validator_factory = validator_factory

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def names(self) -> List[str]:
        return list(self._names)

    def open(self, name: Optional[str], db: Session, owner_id: Optional[uuid.UUID] = None) -> Optional[SqlRepository]:
        if name is None or name not in self._names:
            return None
        return SqlRepository(db, name, owner_id=owner_id, validator=self._validator_factory())
