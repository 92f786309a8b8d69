"""initial_schema

Revision ID: initial_schema_2026
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'initial_schema_2026'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
        sa.Column('whatsapp_number', sa.String(), nullable=False, comment='Sender identifier as delivered by the WhatsApp gateway'),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_whatsapp_number'), 'users', ['whatsapp_number'], unique=True)

    op.create_table('whatsapp_messages',
        sa.Column('external_id', sa.String(), nullable=False, comment='Channel message ID (or generated UUID) for re-delivery detection'),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('user_phone', sa.String(), nullable=False),
        sa.Column('message_content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(length=32), nullable=False),
        sa.Column('media_url', sa.String(), nullable=True),
        sa.Column('received_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ai_response', sa.Text(), nullable=True),
        sa.Column('processed', sa.Boolean(), nullable=False),
        sa.Column('outcome', sa.String(length=64), nullable=True, comment='transaction, advisory, unregistered or malformed:<reason>'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_whatsapp_messages_id'), 'whatsapp_messages', ['id'], unique=False)
    op.create_index(op.f('ix_whatsapp_messages_external_id'), 'whatsapp_messages', ['external_id'], unique=True)
    op.create_index(op.f('ix_whatsapp_messages_user_id'), 'whatsapp_messages', ['user_id'], unique=False)
    op.create_index(op.f('ix_whatsapp_messages_user_phone'), 'whatsapp_messages', ['user_phone'], unique=False)

    op.create_table('transactions',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False, comment='income or expense'),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('processed_by_ai', sa.Boolean(), nullable=False, comment='Machine-extracted provenance flag'),
        sa.Column('whatsapp_message_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['whatsapp_message_id'], ['whatsapp_messages.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('whatsapp_message_id'),
    )
    op.create_index(op.f('ix_transactions_id'), 'transactions', ['id'], unique=False)
    op.create_index(op.f('ix_transactions_user_id'), 'transactions', ['user_id'], unique=False)
    op.create_index('idx_transactions_user_created', 'transactions', ['user_id', 'created_at'], unique=False)
    op.create_index('idx_transactions_deleted_at', 'transactions', ['deleted_at'], unique=False)

    op.create_table('ai_analysis',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('analysis_type', sa.String(length=64), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ai_analysis_id'), 'ai_analysis', ['id'], unique=False)
    op.create_index(op.f('ix_ai_analysis_user_id'), 'ai_analysis', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('ai_analysis')
    op.drop_table('transactions')
    op.drop_table('whatsapp_messages')
    op.drop_table('users')
