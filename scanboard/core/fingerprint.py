"""Content fingerprints used as value identity for replace/delete."""
from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import ValidationError

from scanboard.db.schemas import RepositoryRecord


def canonical_json(record: Any) -> str:
    """Serialize a record so equivalent records produce identical text.

    Mappings are parsed into RepositoryRecord first, which normalizes key order,
    the ``data``/``scan`` alias, numeric formatting and timestamp zones. Values
    that do not parse are serialized as given, or by ``repr`` when JSON cannot
    represent them.
    """
    try:
        document: Any = RepositoryRecord.coerce(record).to_document()
    except ValidationError:
        document = record
    try:
        return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        # Mixed-type keys or circular values; such records can never match a stored one
        return repr(document)


def fingerprint(record: Any) -> str:
    return hashlib.sha256(canonical_json(record).encode("utf-8")).hexdigest()
