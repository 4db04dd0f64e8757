"""Initial billing schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Operators, group rights, accounts and the versioned account_tariff_link table.
Note: SQLite tests use Base.metadata.create_all and do not run Alembic.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === SYSTEM_ACCOUNTS (operators) ===
    op.create_table(
        'system_accounts',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('login', sa.String(64), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('NOW()')),
    )
    op.create_index('ix_system_accounts_login', 'system_accounts', ['login'])

    # === SYSTEM_GROUPS (membership) / SYSTEM_RIGHTS (fid per group) ===
    op.create_table(
        'system_groups',
        sa.Column('group_id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.BigInteger,
                  sa.ForeignKey('system_accounts.id', ondelete='CASCADE'),
                  primary_key=True),
    )
    op.create_index('ix_system_groups_user_id', 'system_groups', ['user_id'])

    op.create_table(
        'system_rights',
        sa.Column('group_id', sa.Integer, primary_key=True),
        sa.Column('fid', sa.Integer, primary_key=True),
    )
    op.create_index('ix_system_rights_fid_group', 'system_rights', ['fid', 'group_id'])

    # === ACCOUNTS ===
    op.create_table(
        'accounts',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('NOW()')),
    )

    # === ACCOUNT_TARIFF_LINK (optimistic lock on `version`) ===
    op.create_table(
        'account_tariff_link',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('account_id', sa.BigInteger,
                  sa.ForeignKey('accounts.id', ondelete='CASCADE'),
                  nullable=False, unique=True),
        sa.Column('tariff_id', sa.BigInteger, nullable=False),
        sa.Column('version', sa.BigInteger, nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('NOW()')),
        sa.Column('updated_by', sa.BigInteger,
                  sa.ForeignKey('system_accounts.id', ondelete='SET NULL'),
                  nullable=True),
        sa.CheckConstraint('version >= 1', name='chk_account_tariff_link_version_positive'),
    )
    op.create_index('ix_account_tariff_link_account_id', 'account_tariff_link', ['account_id'])


def downgrade() -> None:
    op.drop_table('account_tariff_link')
    op.drop_table('accounts')
    op.drop_table('system_rights')
    op.drop_table('system_groups')
    op.drop_index('ix_system_accounts_login', table_name='system_accounts')
    op.drop_table('system_accounts')
