"""Initial reservation schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_RESERVATION_CLAUSE = "status IN ('pending', 'confirmed')"


def _base_columns():
    return [
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'profiles',
        *_base_columns(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='customer'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.CheckConstraint("role IN ('admin', 'agent', 'customer')", name='check_profile_role'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'properties',
        *_base_columns(),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('price', sa.Numeric(14, 2), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('units_total', sa.Integer(), nullable=True),
        sa.Column('units_available', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.CheckConstraint("units_total IS NULL OR units_total >= 0", name='check_property_units_total'),
        sa.CheckConstraint(
            "units_available IS NULL OR (units_available >= 0 AND "
            "(units_total IS NULL OR units_available <= units_total))",
            name='check_property_units_available'
        ),
    )
    op.create_index('idx_properties_agent_id', 'properties', ['agent_id'])

    op.create_table(
        'reservations',
        *_base_columns(),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reservation_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name='check_reservation_status'
        ),
    )
    op.create_index('idx_reservations_customer_id', 'reservations', ['customer_id'])
    op.create_index('idx_reservations_property_id', 'reservations', ['property_id'])
    op.create_index('idx_reservations_agent_id', 'reservations', ['agent_id'])
    op.create_index('idx_reservations_reservation_time', 'reservations', ['reservation_time'])
    op.create_index(
        'uq_reservations_active_customer_property',
        'reservations',
        ['customer_id', 'property_id'],
        unique=True,
        postgresql_where=sa.text(ACTIVE_RESERVATION_CLAUSE),
        sqlite_where=sa.text(ACTIVE_RESERVATION_CLAUSE),
    )

    op.create_table(
        'reservation_status_history',
        *_base_columns(),
        sa.Column('reservation_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('reservations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_status', sa.String(20), nullable=True),
        sa.Column('to_status', sa.String(20), nullable=False),
        sa.Column('changed_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('changed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
    )
    op.create_index(
        'idx_reservation_status_history_reservation_id',
        'reservation_status_history',
        ['reservation_id']
    )

    op.create_table(
        'conversations',
        *_base_columns(),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('agent_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('last_message_time', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        'idx_conversations_customer_agent_property',
        'conversations',
        ['customer_id', 'agent_id', 'property_id']
    )

    op.create_table(
        'notifications',
        *_base_columns(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('related_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('idx_notifications_user_id_created_at', 'notifications', ['user_id', 'created_at'])

    op.create_table(
        'audit_logs',
        *_base_columns(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('resource_type', sa.String(100), nullable=True),
        sa.Column('resource_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
    )
    op.create_index('idx_audit_logs_resource', 'audit_logs', ['resource_type', 'resource_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('audit_logs')
    op.drop_table('notifications')
    op.drop_table('conversations')
    op.drop_table('reservation_status_history')
    op.drop_index('uq_reservations_active_customer_property', table_name='reservations')
    op.drop_table('reservations')
    op.drop_table('properties')
    op.drop_table('profiles')
