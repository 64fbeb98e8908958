"""Contact messages, contact files and messages

Revision ID: 0001_contact_and_message_tables
Revises:
Create Date: 2025-09-14

Baseline schema for the contact form intake and the message service.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_contact_and_message_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create contact and message tables."""

    # ==========================================================================
    # Contact Messages
    # ==========================================================================
    op.create_table(
        'contact_messages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('phone_number', sa.String(20), nullable=True),
        sa.Column('company', sa.String(200), nullable=True),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('contact_type', sa.String(20), nullable=False, server_default='general'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('status', sa.String(20), nullable=False, server_default='new'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('idx_contact_messages_email', 'contact_messages', ['email'])
    op.create_index('idx_contact_messages_created_at', 'contact_messages', ['created_at'])
    op.create_index('idx_contact_messages_status', 'contact_messages', ['status'])
    op.create_index('idx_contact_messages_contact_type', 'contact_messages', ['contact_type'])

    # ==========================================================================
    # Contact Files (metadata for objects held by the Upload Service)
    # ==========================================================================
    op.create_table(
        'contact_files',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'contact_message_id',
            sa.Integer(),
            sa.ForeignKey('contact_messages.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('object_name', sa.String(500), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('content_type', sa.String(100), nullable=True),
        sa.Column('upload_service_file_id', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_contact_files_contact_message_id', 'contact_files', ['contact_message_id'])

    # ==========================================================================
    # Messages
    # ==========================================================================
    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.String(50), nullable=False),
        sa.Column('last_name', sa.String(50), nullable=False),
        sa.Column('company', sa.String(50), nullable=True),
        sa.Column('email', sa.String(50), nullable=False),
        sa.Column('telephone', sa.String(50), nullable=True),
        sa.Column('country', sa.String(50), nullable=True),
        sa.Column('message_content', sa.Text(), nullable=False),
        sa.Column('created_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('modified_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('messages')
    op.drop_index('idx_contact_files_contact_message_id', table_name='contact_files')
    op.drop_table('contact_files')
    op.drop_index('idx_contact_messages_contact_type', table_name='contact_messages')
    op.drop_index('idx_contact_messages_status', table_name='contact_messages')
    op.drop_index('idx_contact_messages_created_at', table_name='contact_messages')
    op.drop_index('idx_contact_messages_email', table_name='contact_messages')
    op.drop_table('contact_messages')
