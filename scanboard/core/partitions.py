"""Named partitions ("default", "ai", ...) mapped to their repositories."""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from scanboard.core.memory_repository import InMemoryRepository
from scanboard.core.validator import Validator, default_validator


class PartitionDirectory:
    """Explicit directory of in-memory partitions owned by the app factory."""

    def __init__(self, partitions: Mapping[str, InMemoryRepository]):
        self._partitions: Dict[str, InMemoryRepository] = dict(partitions)

    @classmethod
    def from_names(
        cls,
        names: Iterable[str],
        validator_factory: Callable[[], Validator] = default_validator,
    ) -> "PartitionDirectory":
        return cls({name: InMemoryRepository(validator_factory()) for name in names})

    def __contains__(self, name: object) -> bool:
        return name in self._partitions

    def names(self) -> List[str]:
        return list(self._partitions)

    def get(self, name: Optional[str]) -> Optional[InMemoryRepository]:
        if name is None:
            return None
        return self._partitions.get(name)

    def open(self, name: Optional[str], db: Any = None, owner_id: Any = None) -> Optional[InMemoryRepository]:
        # In-memory partitions are shared by every caller
        return self.get(name)
