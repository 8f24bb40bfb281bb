"""create_charges_tables

Revision ID: 5b1c2e7a9d40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5b1c2e7a9d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'charges',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('gateway_id', sa.String(length=64), nullable=False, comment='网关费用ID ch_...'),
        sa.Column('order_id', sa.String(length=64), nullable=True, comment='网关订单ID or_...'),
        sa.Column('code', sa.String(length=100), nullable=True, comment='平台侧费用编码'),
        sa.Column('amount', sa.Integer(), nullable=False, server_default='0', comment='费用金额'),
        sa.Column('paid_amount', sa.Integer(), nullable=False, server_default='0', comment='已捕获金额'),
        sa.Column('canceled_amount', sa.Integer(), nullable=False, server_default='0', comment='已取消金额'),
        sa.Column('refunded_amount', sa.Integer(), nullable=False, server_default='0', comment='已退款金额'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending', comment='费用状态: pending/paid/canceled'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='更新时间'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_charges_id', 'charges', ['id'], unique=False)
    op.create_index('ix_charges_gateway_id', 'charges', ['gateway_id'], unique=True)
    op.create_index('ix_charges_order_id', 'charges', ['order_id'], unique=False)
    op.create_index('ix_charges_status', 'charges', ['status'], unique=False)

    op.create_table(
        'charge_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('charge_pk', sa.Integer(), nullable=False, comment='关联的费用ID'),
        sa.Column('gateway_id', sa.String(length=64), nullable=False, comment='网关交易ID tran_...'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0', comment='在费用交易列表中的位置'),
        sa.Column('transaction_type', sa.String(length=20), nullable=False, server_default='credit_card', comment='交易类型'),
        sa.Column('status', sa.String(length=40), nullable=False, server_default='pending', comment='交易状态'),
        sa.Column('amount', sa.Integer(), nullable=False, server_default='0', comment='交易金额'),
        sa.Column('paid_amount', sa.Integer(), nullable=False, server_default='0', comment='交易已付金额'),
        sa.Column('acquirer_message', sa.Text(), nullable=True, comment='收单方消息'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, comment='网关创建时间'),
        sa.ForeignKeyConstraint(['charge_pk'], ['charges.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('gateway_id'),
    )
    op.create_index('ix_charge_transactions_id', 'charge_transactions', ['id'], unique=False)
    op.create_index('ix_charge_transactions_charge_pk', 'charge_transactions', ['charge_pk'], unique=False)
    op.create_index('ix_charge_transactions_charge_position', 'charge_transactions', ['charge_pk', 'position'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_charge_transactions_charge_position', table_name='charge_transactions')
    op.drop_index('ix_charge_transactions_charge_pk', table_name='charge_transactions')
    op.drop_index('ix_charge_transactions_id', table_name='charge_transactions')
    op.drop_table('charge_transactions')
    op.drop_index('ix_charges_status', table_name='charges')
    op.drop_index('ix_charges_order_id', table_name='charges')
    op.drop_index('ix_charges_gateway_id', table_name='charges')
    op.drop_index('ix_charges_id', table_name='charges')
    op.drop_table('charges')
