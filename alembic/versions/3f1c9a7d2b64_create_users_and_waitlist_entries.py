"""create users and waitlist entries

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-18 09:12:41.507113

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = '3f1c9a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('user', 'admin', name='user_role')
waitlist_status = sa.Enum('pending', 'approved', 'rejected', name='waitlist_status')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id',              sa.Integer(),     primary_key=True, autoincrement=True),
        sa.Column('email',           sa.String(255),   nullable=False),
        sa.Column('hashed_password', sa.String(255),   nullable=False),
        sa.Column('role',            user_role,        nullable=False),
        sa.Column('is_active',       sa.Boolean(),     nullable=False),
        sa.Column('full_name',       sa.String(255),   nullable=True),
        sa.Column('created_at',      sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at',      sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'waitlist_entries',
        sa.Column('id',           sa.String(36),    primary_key=True),
        sa.Column('email',        sa.String(255),   nullable=False),
        sa.Column('status',       waitlist_status,  nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processed_by', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='NO ACTION'), nullable=True),
        sa.Column('extra',        sa.JSON(),        nullable=False),
    )
    op.create_index('ix_waitlist_entries_email', 'waitlist_entries', ['email'], unique=True)
    op.create_index('ix_waitlist_entries_status', 'waitlist_entries', ['status'])


def downgrade() -> None:
    op.drop_index('ix_waitlist_entries_status', table_name='waitlist_entries')
    op.drop_index('ix_waitlist_entries_email', table_name='waitlist_entries')
    op.drop_table('waitlist_entries')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    waitlist_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
