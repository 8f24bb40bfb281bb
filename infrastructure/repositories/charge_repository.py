"""
费用仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from domain.charge.entity import Charge
from domain.charge.repository import ChargeRepository
from domain.charge.transaction import Transaction
from domain.charge.value_objects import ChargeId, OrderId
from domain.common.exceptions import ChargeNotFoundException
from infrastructure.models.charge import ChargeModel, TransactionModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyChargeRepository(ChargeRepository):
    """费用仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _transaction_to_entity(self, model: TransactionModel, charge_id: Optional[str]) -> Transaction:
        return Transaction(
            id=model.id,
            gateway_id=model.gateway_id,
            transaction_type=model.transaction_type,
            status=model.status,
            amount=model.amount,
            paid_amount=model.paid_amount,
            charge_id=charge_id,
            acquirer_message=model.acquirer_message,
            created_at=model.created_at,
        )

    def _to_entity(self, model: ChargeModel) -> Charge:
        """将数据库模型转换为领域实体"""
        return Charge(
            id=model.id,
            gateway_id=model.gateway_id,
            order_id=model.order_id,
            amount=model.amount,
            paid_amount=model.paid_amount,
            canceled_amount=model.canceled_amount,
            refunded_amount=model.refunded_amount,
            code=model.code,
            status=model.status,
            transactions=[self._transaction_to_entity(t, model.gateway_id) for t in model.transactions],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _transaction_to_model(self, entity: Transaction, position: int) -> TransactionModel:
        return TransactionModel(
            id=entity.id,
            gateway_id=str(entity.gateway_id),
            position=position,
            transaction_type=entity.transaction_type.value,
            status=entity.status.value,
            amount=entity.amount,
            paid_amount=entity.paid_amount,
            acquirer_message=entity.acquirer_message,
            created_at=entity.created_at,
        )

    def _to_model(self, entity: Charge) -> ChargeModel:
        """将领域实体转换为数据库模型"""
        now = datetime.now(timezone.utc)
        return ChargeModel(
            id=entity.id,
            gateway_id=str(entity.gateway_id),
            order_id=str(entity.order_id) if entity.order_id else None,
            code=entity.code,
            amount=entity.amount,
            paid_amount=entity.paid_amount,
            canceled_amount=entity.canceled_amount,
            refunded_amount=entity.refunded_amount,
            status=entity.status.value,
            created_at=entity.created_at or now,
            updated_at=entity.updated_at or now,
            transactions=[
                self._transaction_to_model(t, position) for position, t in enumerate(entity.transactions)
            ],
        )

    def _query(self):
        return select(ChargeModel).options(selectinload(ChargeModel.transactions))

    async def get_by_id(self, charge_id: int) -> Optional[Charge]:
        """根据本地ID获取费用"""
        result = await self.session.execute(self._query().where(ChargeModel.id == charge_id))
        db_charge = result.scalar_one_or_none()
        return self._to_entity(db_charge) if db_charge else None

    async def get_by_gateway_id(self, gateway_id: ChargeId) -> Optional[Charge]:
        """根据网关费用ID获取费用"""
        result = await self.session.execute(
            self._query().where(ChargeModel.gateway_id == str(gateway_id))
        )
        db_charge = result.scalar_one_or_none()
        return self._to_entity(db_charge) if db_charge else None

    async def list_by_order(self, order_id: OrderId) -> List[Charge]:
        """获取订单下的费用列表"""
        result = await self.session.execute(
            self._query().where(ChargeModel.order_id == str(order_id)).order_by(ChargeModel.id)
        )
        return [self._to_entity(c) for c in result.scalars().all()]

    async def save(self, charge: Charge) -> Charge:
        """新增或更新费用；交易按网关交易ID upsert"""
        if charge.id is None:
            db_charge = self._to_model(charge)
            self.session.add(db_charge)
            await self.session.flush()
            logger.info(
                "charge_created",
                charge_id=db_charge.id,
                gateway_id=db_charge.gateway_id,
                amount=db_charge.amount,
            )
            return self._to_entity(db_charge)

        result = await self.session.execute(self._query().where(ChargeModel.id == charge.id))
        db_charge = result.scalar_one_or_none()
        if not db_charge:
            raise ChargeNotFoundException(str(charge.gateway_id))

        # 更新字段
        db_charge.order_id = str(charge.order_id) if charge.order_id else None
        db_charge.code = charge.code
        db_charge.amount = charge.amount
        db_charge.paid_amount = charge.paid_amount
        db_charge.canceled_amount = charge.canceled_amount
        db_charge.refunded_amount = charge.refunded_amount
        db_charge.status = charge.status.value
        db_charge.updated_at = charge.updated_at or datetime.now(timezone.utc)

        existing = {t.gateway_id: t for t in db_charge.transactions}
        for position, transaction in enumerate(charge.transactions):
            db_tx = existing.get(str(transaction.gateway_id))
            if db_tx is None:
                db_charge.transactions.append(self._transaction_to_model(transaction, position))
                continue
            db_tx.position = position
            db_tx.transaction_type = transaction.transaction_type.value
            db_tx.status = transaction.status.value
            db_tx.amount = transaction.amount
            db_tx.paid_amount = transaction.paid_amount
            db_tx.acquirer_message = transaction.acquirer_message
            db_tx.created_at = transaction.created_at

        await self.session.flush()

        logger.info(
            "charge_updated",
            charge_id=db_charge.id,
            gateway_id=db_charge.gateway_id,
            status=db_charge.status,
            transactions=len(db_charge.transactions),
        )
        return self._to_entity(db_charge)
