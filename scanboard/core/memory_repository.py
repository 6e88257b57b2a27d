"""
Process-local repository of scan records for one partition.

Records keep insertion order; sort and filter always work on a copy. Replace
and delete locate records by content fingerprint, first match wins. A
re-entrant lock makes each lookup-then-mutate step atomic so one instance can
be shared by the FastAPI threadpool.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Optional

from scanboard.core import ordering
from scanboard.core.envelope import ENTITY_NOT_FOUND, Envelope
from scanboard.core.fingerprint import fingerprint
from scanboard.core.validator import Validator, default_validator
from scanboard.db.schemas import RepositoryRecord

logger = logging.getLogger(__name__)


class InMemoryRepository:
    def __init__(self, validator: Optional[Validator] = None, records: Iterable[RepositoryRecord] = ()):
        self.validator = validator if validator is not None else default_validator()
        self._lock = threading.RLock()
        self._records: List[RepositoryRecord] = []
        self._fingerprints: List[str] = []
        for record in records:
            self._append(RepositoryRecord.coerce(record))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _append(self, record: RepositoryRecord) -> None:
        self._records.append(record)
        self._fingerprints.append(fingerprint(record))

    def _snapshot(self) -> List[RepositoryRecord]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._records]

    def _index_of(self, record: Any) -> int:
        target = fingerprint(record)
        for idx, candidate in enumerate(self._fingerprints):
            if candidate == target:
                return idx
        return -1

    def get_all(self) -> Envelope:
        return Envelope.ok(self._snapshot())

    def insert(self, record: Any) -> Envelope:
        status = self.validator.validate(record)
        if not status.succeeded:
            logger.debug("insert_rejected: message=%s", status.message)
            return status
        # A validator that accepts an unparseable record has broken its contract
        parsed = RepositoryRecord.coerce(record)
        with self._lock:
            self._append(parsed)
        return Envelope.ok()

    def replace(self, record: Any, new_record: Any) -> Envelope:
        with self._lock:
            idx = self._index_of(record)
            if idx == -1:
                return Envelope.fail(ENTITY_NOT_FOUND)
            status = self.validator.validate(new_record)
            if not status.succeeded:
                return status
            parsed = RepositoryRecord.coerce(new_record)
            self._records[idx] = parsed
            self._fingerprints[idx] = fingerprint(parsed)
        return Envelope.ok()

    def delete(self, record: Any) -> Envelope:
        with self._lock:
            idx = self._index_of(record)
            if idx == -1:
                return Envelope.fail(ENTITY_NOT_FOUND)
            del self._records[idx]
            del self._fingerprints[idx]
        return Envelope.ok()

    def sort(self, order: Optional[str] = ordering.DEFAULT_ORDER, field: Optional[str] = ordering.DEFAULT_FIELD) -> Envelope:
        error = ordering.sort_argument_error(order, field)
        if error is not None:
            return error
        return ordering.sort_records(self._snapshot(), order, field)

    def filter(self, min_percent: Any) -> Envelope:
        error = ordering.threshold_error(min_percent)
        if error is not None:
            return error
        return ordering.filter_records(self._snapshot(), min_percent)

    def get_page(self, page: int = 1, limit: int = 10) -> Envelope:
        error = ordering.page_error(page, limit)
        if error is not None:
            return error
        with self._lock:
            total = len(self._records)
            start = (page - 1) * limit
            items = [record.model_copy(deep=True) for record in self._records[start:start + limit]]
        return Envelope.ok(ordering.page_payload(items, total, limit))

    def stats(self) -> Envelope:
        with self._lock:
            summary = ordering.summarize(self._records)
        return Envelope.ok(summary)
