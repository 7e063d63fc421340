"""Add chat messages and conversation preview

Revision ID: 0002_chat_messages
Revises: 0001_initial
Create Date: 2026-10-19 14:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0002_chat_messages"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('conversations', sa.Column('last_message', sa.Text(), nullable=True))

    op.create_table(
        'chat_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('conversation_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('sender_role', sa.String(20), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
    )
    op.create_index(
        'idx_chat_messages_conversation_id_created_at',
        'chat_messages',
        ['conversation_id', 'created_at']
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_chat_messages_conversation_id_created_at', table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_column('conversations', 'last_message')
