"""Add messages table

Revision ID: 0001_add_messages_table
Revises:
Create Date: 2026-10-19

Creates the table backing the messaging engine. Threads are derived from
messages at read time and have no table.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_add_messages_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'messages',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('thread_id', sa.String(64), nullable=False),
        sa.Column('sender_id', sa.String(64), nullable=False),
        sa.Column('sender_name', sa.String(255), nullable=False),
        sa.Column('sender_role', sa.String(20), nullable=False),
        sa.Column('sender_avatar', sa.String(1024), nullable=True),
        sa.Column('recipient_id', sa.String(64), nullable=False),
        sa.Column('recipient_name', sa.String(255), nullable=False),
        sa.Column('recipient_role', sa.String(20), nullable=False),
        sa.Column('recipient_avatar', sa.String(1024), nullable=True),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='normal'),
        sa.Column('category', sa.String(20), nullable=False, server_default='general'),
        sa.Column('status', sa.String(20), nullable=False, server_default='sent'),
        sa.Column('is_starred', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reply_to_id', sa.String(64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('replied_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_messages_thread_id', 'messages', ['thread_id'], unique=False)
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'], unique=False)
    op.create_index('ix_messages_recipient_id', 'messages', ['recipient_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_messages_recipient_id', table_name='messages')
    op.drop_index('ix_messages_sender_id', table_name='messages')
    op.drop_index('ix_messages_thread_id', table_name='messages')
    op.drop_table('messages')
