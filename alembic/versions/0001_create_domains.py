"""create domains and domain_events

Revision ID: 0001_create_domains
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_create_domains'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'domains',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('brand_id', sa.String(length=100), nullable=False),
        sa.Column('hostname', sa.String(length=253), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('verification_token', sa.String(length=64), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ssl_status', sa.String(length=64), nullable=True),
        sa.Column('provider_domain_id', sa.String(length=255), nullable=True),
        sa.Column('dns_records', sa.JSON(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_domains_hostname', 'domains', ['hostname'], unique=True)
    op.create_index('ix_domains_brand_id', 'domains', ['brand_id'])
    op.create_index('ix_domains_status', 'domains', ['status'])
    op.create_index(
        'uq_domains_brand_primary',
        'domains',
        ['brand_id'],
        unique=True,
        sqlite_where=sa.text('is_primary = 1'),
        postgresql_where=sa.text('is_primary'),
    )

    # No FK to domains: the audit trail outlives removed domains
    op.create_table(
        'domain_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('domain_id', sa.String(length=36), nullable=False),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('performed_by', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_domain_events_domain_id', 'domain_events', ['domain_id'])
    op.create_index('ix_domain_events_event_type', 'domain_events', ['event_type'])
    op.create_index('ix_domain_events_created_at', 'domain_events', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_domain_events_created_at', table_name='domain_events')
    op.drop_index('ix_domain_events_event_type', table_name='domain_events')
    op.drop_index('ix_domain_events_domain_id', table_name='domain_events')
    op.drop_table('domain_events')

    op.drop_index('uq_domains_brand_primary', table_name='domains')
    op.drop_index('ix_domains_status', table_name='domains')
    op.drop_index('ix_domains_brand_id', table_name='domains')
    op.drop_index('ix_domains_hostname', table_name='domains')
    op.drop_table('domains')
