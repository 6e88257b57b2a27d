"""
Initial schema: dashboard users and partitioned scan records.

- users: Argon2 password hash, role, digest of the current refresh token
- scan_records: canonical JSON document plus columns used for ordering,
  filtering and first-match lookups by fingerprint
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial_20261019'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('refresh_token_hash', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'scan_records',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('partition', sa.String(length=64), nullable=False),
        sa.Column('owner_user_id', sa.Uuid(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('repo_name', sa.String(), nullable=False),
        sa.Column('fingerprint', sa.String(length=64), nullable=False),
        sa.Column('document', sa.JSON(), nullable=False),
        sa.Column('percent', sa.Float(), nullable=False),
        sa.Column('created', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated', sa.DateTime(timezone=True), nullable=True),
        sa.Column('found', sa.DateTime(timezone=True), nullable=True),
        sa.Column('inserted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('partition', 'owner_user_id', 'repo_name', name='uq_scan_records_partition_owner_name'),
    )
    op.create_index('idx_scan_records_scope', 'scan_records', ['partition', 'owner_user_id'])
    op.create_index('idx_scan_records_fingerprint', 'scan_records', ['fingerprint'])
    op.create_index('idx_scan_records_percent', 'scan_records', ['percent'])
    op.create_index('idx_scan_records_created', 'scan_records', ['created'])


def downgrade() -> None:
    op.drop_index('idx_scan_records_created', table_name='scan_records')
    op.drop_index('idx_scan_records_percent', table_name='scan_records')
    op.drop_index('idx_scan_records_fingerprint', table_name='scan_records')
    op.drop_index('idx_scan_records_scope', table_name='scan_records')
    op.drop_table('scan_records')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
