"""
费用数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, Text,
    Index, ForeignKey
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .base import Base


class ChargeModel(Base):
    """
    费用数据库模型

    这是数据库表的映射，不包含业务逻辑
    所有业务规则都在 domain.charge.entity.Charge 中
    """
    __tablename__ = "charges"

    # 主键
    id = Column(Integer, primary_key=True, index=True)

    # 网关标识
    gateway_id = Column(String(64), unique=True, index=True, nullable=False, comment="网关费用ID ch_...")
    order_id = Column(String(64), nullable=True, index=True, comment="网关订单ID or_...")
    code = Column(String(100), nullable=True, comment="平台侧费用编码")

    # 金额账本（最小货币单位，整数）
    amount = Column(Integer, nullable=False, default=0, comment="费用金额")
    paid_amount = Column(Integer, nullable=False, default=0, comment="已捕获金额")
    canceled_amount = Column(Integer, nullable=False, default=0, comment="已取消金额")
    refunded_amount = Column(Integer, nullable=False, default=0, comment="已退款金额")

    # 状态
    status = Column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        comment="费用状态: pending/paid/canceled"
    )

    # 时间戳
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间"
    )

    # 关系（按插入位置排序，保持交易列表顺序）
    transactions = relationship(
        "TransactionModel",
        back_populates="charge",
        order_by="TransactionModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return (
            f"<ChargeModel(id={self.id}, gateway_id='{self.gateway_id}', "
            f"amount={self.amount}, status='{self.status}')>"
        )


class TransactionModel(Base):
    """
    交易数据库模型

    交易作为费用聚合的一部分，按网关交易ID唯一
    """
    __tablename__ = "charge_transactions"

    id = Column(Integer, primary_key=True, index=True)

    charge_pk = Column(
        Integer,
        ForeignKey("charges.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="关联的费用ID"
    )
    gateway_id = Column(String(64), unique=True, nullable=False, comment="网关交易ID tran_...")
    position = Column(Integer, nullable=False, default=0, comment="在费用交易列表中的位置")

    transaction_type = Column(String(20), nullable=False, default="credit_card", comment="交易类型")
    status = Column(String(40), nullable=False, default="pending", comment="交易状态")
    amount = Column(Integer, nullable=False, default=0, comment="交易金额")
    paid_amount = Column(Integer, nullable=False, default=0, comment="交易已付金额")
    acquirer_message = Column(Text, nullable=True, comment="收单方消息")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="网关创建时间"
    )

    charge = relationship("ChargeModel", back_populates="transactions")

    __table_args__ = (
        Index("ix_charge_transactions_charge_position", "charge_pk", "position"),
    )

    def __repr__(self):
        return (
            f"<TransactionModel(id={self.id}, gateway_id='{self.gateway_id}', "
            f"status='{self.status}')>"
        )
