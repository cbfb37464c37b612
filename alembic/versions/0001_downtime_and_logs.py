"""create downtime and audit log tables

Revision ID: 0001_downtime_and_logs
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_downtime_and_logs'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # tbl_systems belongs to the system registry; only create it where it is missing
    # (fresh local databases).
    bind = op.get_bind()
    if not sa.inspect(bind).has_table('tbl_systems'):
        op.create_table(
            'tbl_systems',
            sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True),
            sa.Column('name', sa.String(200), nullable=False, index=True),
            sa.Column('code', sa.String(50), nullable=False),
            sa.Column('url', sa.String(50), nullable=False),
            sa.Column('archived', sa.Integer(), nullable=True, server_default='0'),
        )

    op.create_table(
        'tbl_downtime_logs',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True),
        sa.Column('system_id', sa.BigInteger(), sa.ForeignKey('tbl_systems.id', ondelete='CASCADE'), nullable=False),
        sa.Column('from_time', sa.DateTime(), nullable=False),
        sa.Column('to_time', sa.DateTime(), nullable=False),
        sa.Column('reason', sa.String(256), nullable=True),
        sa.Column('finished', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('archived', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(100), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(100), nullable=False),
        sa.CheckConstraint('finished IN (0, 1)', name='ck_downtime_finished_flag'),
        sa.CheckConstraint('archived IN (0, 1)', name='ck_downtime_archived_flag'),
    )
    op.create_index('ix_tbl_downtime_logs_id', 'tbl_downtime_logs', ['id'])
    op.create_index('ix_tbl_downtime_logs_to_time', 'tbl_downtime_logs', ['to_time'])

    op.create_table(
        'tbl_logs',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('action_taken', sa.String(255), nullable=False),
        sa.Column('table_name', sa.String(100), nullable=False),
        sa.Column('column_name', sa.String(255), nullable=False),
        sa.Column('from_value', sa.JSON(), nullable=False),
        sa.Column('to_value', sa.JSON(), nullable=False),
        sa.Column('time_stamp', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('tbl_logs')
    op.drop_index('ix_tbl_downtime_logs_to_time', table_name='tbl_downtime_logs')
    op.drop_index('ix_tbl_downtime_logs_id', table_name='tbl_downtime_logs')
    op.drop_table('tbl_downtime_logs')
