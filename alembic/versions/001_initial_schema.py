"""initial schema: admin users, reset tokens, sessions

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Detect database type
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    json_type = sa.JSON() if is_sqlite else postgresql.JSONB(astext_type=sa.Text())
    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')
    false_default = '0' if is_sqlite else 'false'

    # Create admin_users table
    op.create_table(
        'admin_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=false_default),
        sa.Column('is_frozen', sa.Boolean(), nullable=False, server_default=false_default),
        sa.Column('frozen_at', sa.DateTime(), nullable=True),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_failed_login_at', sa.DateTime(), nullable=True),
        sa.Column('onboarding_token', sa.String(length=64), nullable=True),
        sa.Column('onboarding_token_expiry', sa.DateTime(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('last_password_reset_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('onboarding_token')
    )
    op.create_index('ix_admin_users_id', 'admin_users', ['id'])
    op.create_index('ix_admin_users_email', 'admin_users', ['email'])

    # Create admin_password_reset_tokens table
    op.create_table(
        'admin_password_reset_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('admin_user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('issued_ip', sa.String(length=64), nullable=True),
        sa.Column('issued_user_agent', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('consumed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['admin_user_id'], ['admin_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash')
    )
    op.create_index('ix_admin_password_reset_tokens_id', 'admin_password_reset_tokens', ['id'])
    op.create_index('ix_admin_password_reset_tokens_admin_user_id', 'admin_password_reset_tokens', ['admin_user_id'])
    op.create_index('ix_admin_password_reset_tokens_token_hash', 'admin_password_reset_tokens', ['token_hash'])
    op.create_index('ix_admin_password_reset_tokens_issued_ip', 'admin_password_reset_tokens', ['issued_ip'])
    op.create_index('ix_admin_password_reset_tokens_created_at', 'admin_password_reset_tokens', ['created_at'])

    # Create admin_sessions table
    op.create_table(
        'admin_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('admin_user_id', sa.Integer(), nullable=False),
        sa.Column('data', json_type, nullable=False),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('last_seen_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['admin_user_id'], ['admin_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id')
    )
    op.create_index('ix_admin_sessions_id', 'admin_sessions', ['id'])
    op.create_index('ix_admin_sessions_session_id', 'admin_sessions', ['session_id'])
    op.create_index('ix_admin_sessions_admin_user_id', 'admin_sessions', ['admin_user_id'])
    op.create_index('ix_admin_sessions_expires_at', 'admin_sessions', ['expires_at'])


def downgrade() -> None:
    op.drop_table('admin_sessions')
    op.drop_table('admin_password_reset_tokens')
    op.drop_table('admin_users')
