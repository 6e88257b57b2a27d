"""
Repository-scan record schemas.

Typed entity boundary: raw request bodies are parsed into these models before
they reach a repository, so the rest of the system never sees a record whose
``scan.percent`` is missing or non-numeric.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, List, NamedTuple, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class KeyMarker(NamedTuple):
    """A discovered key, parsed from the ``NAME|PATH`` encoding."""

    name: str
    path: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "KeyMarker":
        name, _sep, path = raw.partition("|")
        return cls(name=name.strip(), path=path.strip() or None)

    def encode(self) -> str:
        return f"{self.name}|{self.path}" if self.path else self.name


class ScanResult(BaseModel):
    percent: float
    links: List[str] = Field(default_factory=list)
    keys_found: List[str] = Field(default_factory=list)
    must_keys: List[str] = Field(default_factory=list)
    bad_keys: List[str] = Field(default_factory=list)

    @field_validator("percent", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> float:
        # bool is an int subclass and numeric strings would be coerced in lax mode
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("percent is not number")
        if not math.isfinite(value):
            raise ValueError("percent must be finite")
        return float(value)

    def found_markers(self) -> List[KeyMarker]:
        return [KeyMarker.parse(raw) for raw in self.keys_found]

    def missing_must_keys(self) -> List[str]:
        """Required markers that were not discovered, in ``must_keys`` order."""
        found = {marker.name for marker in self.found_markers()}
        return [key for key in self.must_keys if key not in found]


class RepositoryRecord(BaseModel):
    repo_name: str
    # Older clients send the nested value under "data"
    scan: ScanResult = Field(validation_alias=AliasChoices("scan", "data"))
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    found: Optional[datetime] = None

    @field_validator("created", "updated", "found")
    @classmethod
    def _normalize_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def percent(self) -> float:
        return self.scan.percent

    @classmethod
    def coerce(cls, value: Any) -> "RepositoryRecord":
        """Return ``value`` as a RepositoryRecord, parsing mappings.

        Raises pydantic.ValidationError when the value cannot be parsed.
        """
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)

    def to_document(self) -> dict:
        """JSON-compatible representation keyed by field name."""
        return self.model_dump(mode="json")
