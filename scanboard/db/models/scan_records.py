from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index, JSON, UniqueConstraint, Uuid
from .base import Base, now_utc


class ScanRecord(Base):
    __tablename__ = 'scan_records'

    # Autoincrement id doubles as insertion order and the stable sort tie-break
    id = Column(Integer, primary_key=True, autoincrement=True)
    partition = Column(String(64), nullable=False)
    owner_user_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=True)
    repo_name = Column(String, nullable=False)

    # Content identity and canonical document (RepositoryRecord in JSON mode)
    fingerprint = Column(String(64), nullable=False)
    document = Column(JSON, nullable=False)

    # Denormalized for ordering/filtering in SQL
    percent = Column(Float, nullable=False)
    created = Column(DateTime(timezone=True), nullable=True)
    updated = Column(DateTime(timezone=True), nullable=True)
    found = Column(DateTime(timezone=True), nullable=True)

    inserted_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint('partition', 'owner_user_id', 'repo_name', name='uq_scan_records_partition_owner_name'),
        Index('idx_scan_records_scope', 'partition', 'owner_user_id'),
        Index('idx_scan_records_fingerprint', 'fingerprint'),
        Index('idx_scan_records_percent', 'percent'),
        Index('idx_scan_records_created', 'created'),
    )
