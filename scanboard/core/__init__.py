"""Repository Core: envelope, validation, fingerprints and partitioned repositories."""

from .envelope import Envelope, Status
from .memory_repository import InMemoryRepository
from .partitions import PartitionDirectory
from .validator import RecordValidator, Validator, default_validator

__all__ = [
    "Envelope",
    "Status",
    "InMemoryRepository",
    "PartitionDirectory",
    "RecordValidator",
    "Validator",
    "default_validator",
]
