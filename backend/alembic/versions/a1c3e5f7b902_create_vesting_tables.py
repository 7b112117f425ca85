"""create_vesting_tables

Revision ID: a1c3e5f7b902
Revises: 
Create Date: 2026-10-17 09:12:44.318207

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b902'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema.

    One fixed-size record per grant, the token accounts (including vaults)
    it moves funds between, and the append-only grant event log.
    """
    op.create_table(
        'vesting_grants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', sa.String(44), nullable=False),
        sa.Column('vault', sa.String(44), nullable=False),
        sa.Column('owner', sa.String(44), nullable=False),
        sa.Column('beneficiary', sa.String(44), nullable=False),
        sa.Column('mint', sa.String(44), nullable=False),
        sa.Column('total_deposited_amount', sa.Numeric(20, 0), nullable=False),
        sa.Column('released_amount', sa.Numeric(20, 0), nullable=False),
        sa.Column('start_ts', sa.BigInteger(), nullable=False),
        sa.Column('cliff_ts', sa.BigInteger(), nullable=False),
        sa.Column('duration', sa.BigInteger(), nullable=False),
        sa.Column('revocable', sa.Boolean(), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vault'),
        sa.UniqueConstraint('beneficiary', 'mint', name='uq_vesting_grant_beneficiary_mint'),
    )
    op.create_index('ix_vesting_grants_address', 'vesting_grants', ['address'], unique=True)
    op.create_index('ix_vesting_grants_owner', 'vesting_grants', ['owner'])
    op.create_index('ix_vesting_grants_beneficiary', 'vesting_grants', ['beneficiary'])
    op.create_index('ix_vesting_grants_mint', 'vesting_grants', ['mint'])

    op.create_table(
        'token_accounts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', sa.String(44), nullable=False),
        sa.Column('owner', sa.String(44), nullable=False),
        sa.Column('mint', sa.String(44), nullable=False),
        sa.Column('amount', sa.Numeric(20, 0), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_token_accounts_address', 'token_accounts', ['address'], unique=True)
    op.create_index('ix_token_accounts_owner_mint', 'token_accounts', ['owner', 'mint'])

    op.create_table(
        'grant_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('grant_address', sa.String(44), nullable=False),
        sa.Column(
            'event_type',
            sa.Enum('INITIALIZE', 'WITHDRAW', 'REVOKE', name='granteventtype'),
            nullable=False,
        ),
        sa.Column('signer', sa.String(44), nullable=False),
        sa.Column('source', sa.String(44), nullable=False),
        sa.Column('destination', sa.String(44), nullable=False),
        sa.Column('amount', sa.Numeric(20, 0), nullable=False),
        sa.Column('released_amount', sa.Numeric(20, 0), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_grant_events_grant_address', 'grant_events', ['grant_address'])
    op.create_index('ix_grant_events_grant_id', 'grant_events', ['grant_address', 'id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_grant_events_grant_id', table_name='grant_events')
    op.drop_index('ix_grant_events_grant_address', table_name='grant_events')
    op.drop_table('grant_events')
    op.execute("DROP TYPE IF EXISTS granteventtype")

    op.drop_index('ix_token_accounts_owner_mint', table_name='token_accounts')
    op.drop_index('ix_token_accounts_address', table_name='token_accounts')
    op.drop_table('token_accounts')

    op.drop_index('ix_vesting_grants_mint', table_name='vesting_grants')
    op.drop_index('ix_vesting_grants_beneficiary', table_name='vesting_grants')
    op.drop_index('ix_vesting_grants_owner', table_name='vesting_grants')
    op.drop_index('ix_vesting_grants_address', table_name='vesting_grants')
    op.drop_table('vesting_grants')
