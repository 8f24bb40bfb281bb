"""
费用应用服务（application/services）- 编排 Charge 聚合、仓储与网关端口

所有修改遵循 load → mutate → save，在同一个 Unit of Work 内完成；
网关调用（capture/void）先于本地修改，网关失败时本地账本保持不变。
"""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Union

from pydantic import ValidationError

from application.dtos.charges import ChargeSnapshot, ChargeWebhookEvent, TransactionPayload
from application.dtos.payments import GatewayChargeResult
from application.ports.payment_gateway import ChargeGateway
from core.i18n import t
from core.logging_config import get_logger
from domain.charge.entity import Charge, ChargeStatus
from domain.charge.events import ChargeCanceled, ChargeEvent, ChargePaid, ChargeRefunded
from domain.charge.transaction import Transaction
from domain.charge.value_objects import ChargeId, OrderId
from domain.common.exceptions import (
    ChargeNotFoundException,
    GatewayUnavailableException,
    InvalidParamException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from shared.codes.payment_codes import WEBHOOK_ACTION_TO_INTERNAL


logger = get_logger(__name__)


def to_transaction(payload: TransactionPayload, charge: Charge) -> Transaction:
    """网关上报的交易 → 领域交易（本地ID留空，由仓储分配）"""
    try:
        return Transaction(
            id=None,
            gateway_id=payload.id,
            transaction_type=payload.transaction_type,
            status=payload.status,
            amount=payload.amount,
            paid_amount=payload.paid_amount or 0,
            charge_id=charge.gateway_id,
            acquirer_message=payload.acquirer_message,
            created_at=payload.created_at,
        )
    except ValueError as exc:
        # 未知的 transaction_type / status 取值
        raise InvalidParamException(
            str(exc),
            payload.status,
            field="transaction",
        ) from None


class ChargeApplicationService:
    """费用应用服务 - 处理应用层逻辑"""

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway: Optional[ChargeGateway] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = gateway
        self.events: List[ChargeEvent] = []

    async def _load(self, uow: AbstractUnitOfWork, charge_id: str) -> Charge:
        charge = await uow.charge_repository.get_by_gateway_id(ChargeId(charge_id))
        if charge is None:
            raise ChargeNotFoundException(charge_id)
        return charge

    def _require_gateway(self) -> ChargeGateway:
        if self._gateway is None:
            raise GatewayUnavailableException()
        return self._gateway

    def _emit(self, event: ChargeEvent) -> None:
        self.events.append(event)

    async def get_charge(self, charge_id: str) -> ChargeSnapshot:
        """获取费用快照"""
        async with self._uow_factory(readonly=True) as uow:
            charge = await self._load(uow, charge_id)
            return ChargeSnapshot.from_entity(charge)

    async def list_order_charges(self, order_id: str) -> List[ChargeSnapshot]:
        async with self._uow_factory(readonly=True) as uow:
            charges = await uow.charge_repository.list_by_order(OrderId(order_id))
            return [ChargeSnapshot.from_entity(c) for c in charges]

    async def pay_charge(self, charge_id: str, amount: int) -> ChargeSnapshot:
        """本地捕获：未捕获的差额记为 canceled"""
        async with self._uow_factory() as uow:
            charge = await self._load(uow, charge_id)
            charge.pay(amount)
            charge = await uow.charge_repository.save(charge)

        self._emit(
            ChargePaid(
                charge_id=str(charge.gateway_id),
                order_id=str(charge.order_id) if charge.order_id else None,
                amount=charge.paid_amount,
                canceled_amount=charge.canceled_amount,
            )
        )
        logger.info(
            "charge_paid",
            charge_id=str(charge.gateway_id),
            paid_amount=charge.paid_amount,
            canceled_amount=charge.canceled_amount,
        )
        return ChargeSnapshot.from_entity(charge)

    async def cancel_charge(self, charge_id: str, amount: int = 0) -> ChargeSnapshot:
        """已支付则退款，否则作废授权"""
        async with self._uow_factory() as uow:
            charge = await self._load(uow, charge_id)
            was_paid = charge.is_paid
            charge.cancel(amount)
            charge = await uow.charge_repository.save(charge)

        self._after_cancel(charge, was_paid)
        return ChargeSnapshot.from_entity(charge)

    def _after_cancel(self, charge: Charge, was_paid: bool) -> None:
        order_id = str(charge.order_id) if charge.order_id else None
        if was_paid:
            self._emit(ChargeRefunded(charge_id=str(charge.gateway_id), order_id=order_id, amount=charge.refunded_amount))
            logger.info("charge_refunded", charge_id=str(charge.gateway_id), refunded_amount=charge.refunded_amount)
        else:
            self._emit(ChargeCanceled(charge_id=str(charge.gateway_id), order_id=order_id, amount=charge.canceled_amount))
            logger.info("charge_canceled", charge_id=str(charge.gateway_id), canceled_amount=charge.canceled_amount)

    async def record_transaction(self, charge_id: str, payload: TransactionPayload) -> ChargeSnapshot:
        """记录网关交易；已存在同一网关交易ID时原位替换并保留本地ID"""
        async with self._uow_factory() as uow:
            charge = await self._load(uow, charge_id)
            charge.update_transaction(to_transaction(payload, charge), overwrite_id=True)
            charge = await uow.charge_repository.save(charge)

        logger.info(
            "transaction_recorded",
            charge_id=charge_id,
            transaction_id=payload.id,
            status=payload.status,
            transactions=len(charge.transactions),
        )
        return ChargeSnapshot.from_entity(charge)

    async def capture_charge(self, charge_id: str, amount: int) -> ChargeSnapshot:
        """网关捕获 → 本地 pay（以网关返回的 paid_amount 为准）"""
        gateway = self._require_gateway()
        async with self._uow_factory() as uow:
            charge = await self._load(uow, charge_id)
            # 先做本地状态检查，避免对已支付/已取消的费用发起远程调用
            if not charge.is_pending:
                charge.pay(amount)
            result = await gateway.capture_charge(str(charge.gateway_id), amount)
            charge.pay(result.paid_amount if result.paid_amount is not None else amount)
            self._apply_last_transaction(charge, result)
            charge = await uow.charge_repository.save(charge)

        self._emit(
            ChargePaid(
                charge_id=str(charge.gateway_id),
                order_id=str(charge.order_id) if charge.order_id else None,
                amount=charge.paid_amount,
                canceled_amount=charge.canceled_amount,
            )
        )
        logger.info(
            "charge_captured",
            charge_id=str(charge.gateway_id),
            provider=gateway.provider,
            paid_amount=charge.paid_amount,
        )
        return ChargeSnapshot.from_entity(charge)

    async def void_charge(self, charge_id: str, amount: int = 0) -> ChargeSnapshot:
        """网关取消 → 本地 cancel（已支付时为退款）"""
        gateway = self._require_gateway()
        async with self._uow_factory() as uow:
            charge = await self._load(uow, charge_id)
            was_paid = charge.is_paid
            result = await gateway.cancel_charge(str(charge.gateway_id), amount)
            if was_paid:
                refunded = result.refunded_amount
                charge.cancel(refunded if refunded is not None else amount)
            else:
                charge.cancel(amount)
            self._apply_last_transaction(charge, result)
            charge = await uow.charge_repository.save(charge)

        self._after_cancel(charge, was_paid)
        return ChargeSnapshot.from_entity(charge)

    def _apply_last_transaction(self, charge: Charge, result: GatewayChargeResult) -> None:
        if result.last_transaction:
            self._sync_transaction(charge, result.last_transaction)

    @staticmethod
    def _sync_transaction(charge: Charge, raw: Union[TransactionPayload, dict[str, Any]]) -> None:
        """同步网关回传的交易；交易只是附带信息，无法解析时记录告警并跳过，不影响账本"""
        try:
            payload = raw if isinstance(raw, TransactionPayload) else TransactionPayload.model_validate(raw)
            transaction = to_transaction(payload, charge)
        except (InvalidParamException, ValidationError) as exc:
            logger.warning(
                "transaction_skipped",
                charge_id=str(charge.gateway_id),
                transaction=raw.model_dump() if isinstance(raw, TransactionPayload) else raw,
                error=str(exc),
            )
            return
        charge.update_transaction(transaction, overwrite_id=True)

    async def handle_webhook(self, event: ChargeWebhookEvent) -> dict[str, Any]:
        """处理网关 webhook；未知类型或未知费用直接确认并忽略"""
        target = WEBHOOK_ACTION_TO_INTERNAL.get(event.action) if event.entity == "charge" else None
        if target is None:
            logger.info("webhook_ignored", event_id=event.id, event_type=event.type, reason="unsupported_type")
            return {"handled": False, "message": t("webhook.ignored", entity=event.entity, action=event.action), "charge": None}

        async with self._uow_factory() as uow:
            charge = await uow.charge_repository.get_by_gateway_id(ChargeId(event.data.id))
            if charge is None:
                logger.info("webhook_ignored", event_id=event.id, event_type=event.type, reason="charge_unknown")
                return {"handled": False, "message": t("webhook.ignored", entity=event.entity, action=event.action), "charge": None}

            was_paid = charge.is_paid
            changed = self._apply_webhook(charge, ChargeStatus(target), event)
            if event.data.last_transaction is not None:
                self._sync_transaction(charge, event.data.last_transaction)
            charge = await uow.charge_repository.save(charge)

        if changed == ChargeStatus.PAID:
            self._emit(
                ChargePaid(
                    charge_id=str(charge.gateway_id),
                    order_id=str(charge.order_id) if charge.order_id else None,
                    amount=charge.paid_amount,
                    canceled_amount=charge.canceled_amount,
                )
            )
        elif changed == ChargeStatus.CANCELED:
            self._after_cancel(charge, was_paid)

        logger.info(
            "webhook_handled",
            event_id=event.id,
            event_type=event.type,
            charge_id=str(charge.gateway_id),
            status=charge.status.value,
        )
        return {
            "handled": True,
            "message": t("webhook.received", entity=event.entity, action=event.action),
            "charge": ChargeSnapshot.from_entity(charge),
        }

    @staticmethod
    def _apply_webhook(charge: Charge, target: ChargeStatus, event: ChargeWebhookEvent) -> Optional[ChargeStatus]:
        """把 webhook 状态落到账本上，返回实际发生的迁移（无变化时为 None）"""
        data = event.data
        if target == ChargeStatus.PAID:
            if not charge.is_pending:
                # 重复投递
                return None
            paid = data.paid_amount if data.paid_amount is not None else data.amount
            if paid is None:
                # 未上报金额时按全额捕获
                paid = charge.amount
            charge.pay(paid)
            return ChargeStatus.PAID

        if target == ChargeStatus.CANCELED:
            if charge.is_canceled:
                return None
            if charge.is_paid:
                refunded = data.canceled_amount if data.canceled_amount is not None else charge.paid_amount
                if refunded == charge.refunded_amount:
                    return None
                charge.cancel(refunded)
            else:
                charge.cancel(0)
            return ChargeStatus.CANCELED

        return None
