"""
Uniform result envelope returned by every repository operation.

Shape is ``{status, data?}``: on success ``data`` carries the payload (absent
for bare acknowledgements); on failure it carries a human-readable message.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class Status(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


ENTITY_NOT_FOUND = "entity not found"
UNKNOWN_SORT_METHOD = "unknown sort method"
UNKNOWN_SORT_FIELD = "unknown sort field"
INVALID_PERCENT = "invalid percent"
INVALID_PAGE = "invalid page"
INVALID_ENTITY_PERCENT = "invalid entity, percent is not number"
REPO_UNDEFINED = "repo undefined"
REPO_NOT_FOUND = "repo not found"
DUPLICATE_REPO_NAME = "Repository name already exists"
STORAGE_ERROR = "storage error"


class Envelope(BaseModel):
    status: Status
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "Envelope":
        return cls(status=Status.SUCCESS, data=data)

    @classmethod
    def fail(cls, message: str) -> "Envelope":
        return cls(status=Status.FAILURE, data=message)

    @property
    def succeeded(self) -> bool:
        return self.status is Status.SUCCESS

    @property
    def message(self) -> Optional[str]:
        if self.status is Status.FAILURE and isinstance(self.data, str):
            return self.data
        return None

    def to_dict(self) -> dict:
        """JSON-compatible body; bare envelopes omit ``data``."""
        body = self.model_dump(mode="json")
        if body.get("data") is None:
            body.pop("data", None)
        return body
