"""create account and game_result tables

Revision ID: 5c2e9a71b0d4
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e9a71b0d4'
down_revision = None
branch_labels = None
depends_on = None

ROLES = ('banned', 'muted', 'player', 'admin', 'owner')


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'account' not in existing_tables:
        op.create_table(
            'account',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('email', sa.String(length=120), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('display_name', sa.String(length=64), nullable=True),
            sa.Column('tokens', sa.Integer(), nullable=False, server_default='1000'),
            sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('role', sa.Enum(*ROLES, name='account_role'), nullable=False, server_default='player'),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.CheckConstraint('tokens >= 0', name='ck_account_tokens_nonnegative'),
            sa.CheckConstraint('points >= 0', name='ck_account_points_nonnegative'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_account_username', 'account', ['username'], unique=True)
        op.create_index('ix_account_email', 'account', ['email'], unique=True)

    if 'game_result' not in existing_tables:
        op.create_table(
            'game_result',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('account_id', sa.Integer(), nullable=False),
            sa.Column('game_name', sa.String(length=64), nullable=False),
            sa.Column('won', sa.Boolean(), nullable=False),
            sa.Column('points_earned', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('time_taken', sa.Float(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.CheckConstraint('points_earned >= 0', name='ck_game_result_points_nonnegative'),
            sa.ForeignKeyConstraint(['account_id'], ['account.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_game_result_account_id', 'game_result', ['account_id'], unique=False)


def downgrade():
    op.drop_index('ix_game_result_account_id', table_name='game_result')
    op.drop_table('game_result')
    op.drop_index('ix_account_email', table_name='account')
    op.drop_index('ix_account_username', table_name='account')
    op.drop_table('account')
    sa.Enum(name='account_role').drop(op.get_bind(), checkfirst=True)
