"""
费用领域实体 - Charge 聚合根

Charge 记录一次授权/捕获周期的金额账本（amount/paid/canceled/refunded），
并维护网关上报的交易列表（按网关交易ID去重）。
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Union

from domain.common.exceptions import InvalidOperationException, InvalidParamException

from .transaction import Transaction
from .value_objects import ChargeId, OrderId


class ChargeStatus(str, Enum):
    """费用状态枚举（值相等，反序列化后仍与枚举成员相等）"""
    PENDING = "pending"
    PAID = "paid"
    CANCELED = "canceled"


_VALID_TRANSITIONS = {
    ChargeStatus.PENDING: {ChargeStatus.PENDING, ChargeStatus.PAID, ChargeStatus.CANCELED},
    ChargeStatus.PAID: {ChargeStatus.PAID},
    ChargeStatus.CANCELED: {ChargeStatus.CANCELED},
}


def _coerce_status(status: Union[ChargeStatus, str]) -> ChargeStatus:
    try:
        return ChargeStatus(status)
    except ValueError:
        raise InvalidParamException(
            f"Invalid charge status: {status!r}",
            status,
            field="status",
            message_key="charge.status.invalid",
        ) from None


def _clamp(value: int, upper: Optional[int] = None) -> int:
    """Normalize into ``[0, upper]``; out-of-range values never raise, non-integers do."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParamException(
            "Amount should be an integer!",
            value,
            field="amount",
            message_key="charge.amount.not_integer",
        )
    value = max(value, 0)
    if upper is not None:
        value = min(value, upper)
    return value


def _validate_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidParamException(
            "Amount should be an integer!",
            amount,
            field="amount",
            message_key="charge.amount.not_integer",
        )
    if amount < 0:
        raise InvalidParamException(
            "Amount should be greater or equal to 0!",
            amount,
            field="amount",
            message_key="charge.amount.negative",
        )
    return amount


class Charge:
    """
    费用聚合根 - 订单下的一次授权/捕获

    业务规则：
    1. amount >= 0，设置负数直接报错（严格校验）
    2. paid/canceled/refunded 的设置从不报错，越界值被静默截断：
       canceled ∈ [0, amount]，refunded ∈ [0, paid]
    3. 状态只能 pending → paid 或 pending → canceled
    4. cancel 按当前状态分派：已支付时为退款，否则为作废授权
    5. 交易按网关交易ID唯一
    """

    def __init__(
        self,
        id: Optional[int] = None,
        gateway_id: Union[ChargeId, str, None] = None,
        order_id: Union[OrderId, str, None] = None,
        amount: int = 0,
        paid_amount: Optional[int] = None,
        canceled_amount: Optional[int] = None,
        refunded_amount: Optional[int] = None,
        code: Optional[str] = None,
        status: Union[ChargeStatus, str] = ChargeStatus.PENDING,
        transactions: Optional[Iterable[Transaction]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        self.id = id
        self.gateway_id = ChargeId(gateway_id) if isinstance(gateway_id, str) else gateway_id
        self.order_id = OrderId(order_id) if isinstance(order_id, str) else order_id
        self.code = code
        self.created_at = created_at
        self.updated_at = updated_at

        self._amount = _validate_amount(amount)
        self._paid_amount: Optional[int] = None
        self._canceled_amount: Optional[int] = None
        self._refunded_amount: Optional[int] = None
        # 恢复顺序有意义：refunded 依赖 paid 的上限
        if paid_amount is not None:
            self.paid_amount = paid_amount
        if canceled_amount is not None:
            self.canceled_amount = canceled_amount
        if refunded_amount is not None:
            self.refunded_amount = refunded_amount

        self._status = _coerce_status(status)
        self._transactions: list[Transaction] = []
        for transaction in transactions or ():
            self.add_transaction(transaction)

    def __repr__(self) -> str:
        return (
            f"<Charge(id={self.id}, gateway_id='{self.gateway_id}', amount={self._amount}, "
            f"paid={self.paid_amount}, canceled={self.canceled_amount}, "
            f"refunded={self.refunded_amount}, status='{self._status.value}')>"
        )

    # ------------------------------------------------------------------
    # 金额账本
    # ------------------------------------------------------------------
    @property
    def amount(self) -> int:
        return self._amount

    @amount.setter
    def amount(self, value: int) -> None:
        self._amount = _validate_amount(value)
        if self._canceled_amount is not None:
            self.canceled_amount = self._canceled_amount

    @property
    def paid_amount(self) -> int:
        return self._paid_amount if self._paid_amount is not None else 0

    @paid_amount.setter
    def paid_amount(self, value: int) -> None:
        self._paid_amount = _clamp(value)
        if self._refunded_amount is not None:
            self.refunded_amount = self._refunded_amount

    @property
    def canceled_amount(self) -> int:
        """永远不会被捕获的金额"""
        return self._canceled_amount if self._canceled_amount is not None else 0

    @canceled_amount.setter
    def canceled_amount(self, value: int) -> None:
        self._canceled_amount = _clamp(value, self._amount)

    @property
    def refunded_amount(self) -> int:
        """曾被捕获、之后退还给客户的金额"""
        return self._refunded_amount if self._refunded_amount is not None else 0

    @refunded_amount.setter
    def refunded_amount(self, value: int) -> None:
        self._refunded_amount = _clamp(value, self.paid_amount)

    @property
    def outstanding_amount(self) -> int:
        """既未捕获也未取消的金额"""
        return max(self._amount - self.paid_amount - self.canceled_amount, 0)

    @property
    def net_paid_amount(self) -> int:
        return self.paid_amount - self.refunded_amount

    # ------------------------------------------------------------------
    # 状态机
    # ------------------------------------------------------------------
    @property
    def status(self) -> ChargeStatus:
        return self._status

    @status.setter
    def status(self, value: Union[ChargeStatus, str]) -> None:
        target = _coerce_status(value)
        if target not in _VALID_TRANSITIONS[self._status]:
            raise InvalidOperationException(
                f"Cannot transition charge from {self._status.value} to {target.value}",
                details={"current": self._status.value, "target": target.value},
                message_key="charge.status.transition_invalid",
            )
        self._status = target

    @property
    def is_pending(self) -> bool:
        return self._status == ChargeStatus.PENDING

    @property
    def is_paid(self) -> bool:
        return self._status == ChargeStatus.PAID

    @property
    def is_canceled(self) -> bool:
        return self._status == ChargeStatus.CANCELED

    def pay(self, amount: int) -> None:
        """
        捕获费用

        业务规则：
        1. 已支付的费用不能再次支付
        2. 只有 pending 的费用可以支付
        3. 未捕获的差额记为 canceled（授权被释放），而不是 refunded
        """
        if self._status == ChargeStatus.PAID:
            raise InvalidOperationException(
                "You can't pay a charge that was paid already!",
                message_key="charge.pay.already_paid",
            )
        if self._status != ChargeStatus.PENDING:
            raise InvalidOperationException(
                "You can't pay a charge that isn't pending!",
                details={"status": self._status.value},
                message_key="charge.pay.not_pending",
            )

        self.paid_amount = amount
        self.canceled_amount = self._amount - self.paid_amount
        self._status = ChargeStatus.PAID
        self._touch()

    def cancel(self, amount: int) -> None:
        """
        取消费用

        已支付 → 退款（状态保持 paid）；否则 → 作废授权（忽略 amount，全额取消）。
        调用方无需关心是哪一种，由费用自身状态决定。
        """
        if self._status == ChargeStatus.PAID:
            self._refund(amount)
        else:
            self._void()
        self._touch()

    def _refund(self, amount: int) -> None:
        self.refunded_amount = amount

    def _void(self) -> None:
        self.canceled_amount = self._amount
        self._status = ChargeStatus.CANCELED

    def _touch(self) -> None:
        now = datetime.now(timezone.utc)
        self.updated_at = now
        if self.created_at is None:
            self.created_at = now

    # ------------------------------------------------------------------
    # 交易列表
    # ------------------------------------------------------------------
    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def last_transaction(self) -> Optional[Transaction]:
        """创建时间最新的交易；时间相同时先出现者优先"""
        if not self._transactions:
            return None

        newest = self._transactions[0]
        for transaction in self._transactions:
            if newest.created_at < transaction.created_at:
                newest = transaction
        return newest

    def add_transaction(self, transaction: Transaction) -> "Charge":
        """添加交易；同一网关交易ID重复添加时为空操作"""
        for existing in self._transactions:
            if existing.gateway_id == transaction.gateway_id:
                return self

        self._transactions.append(transaction)
        return self

    def update_transaction(self, transaction: Transaction, overwrite_id: bool = False) -> "Charge":
        """
        原位替换同一网关交易ID的交易

        overwrite_id=True 时保留被替换交易的本地ID（持久化身份不变）；
        找不到匹配时退化为 add_transaction。
        """
        for index, existing in enumerate(self._transactions):
            if existing.gateway_id == transaction.gateway_id:
                if overwrite_id:
                    transaction.id = existing.id
                self._transactions[index] = transaction
                return self

        return self.add_transaction(transaction)

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------
    def to_snapshot(self) -> dict[str, Any]:
        """可序列化快照；last_transaction 不在快照内"""
        return {
            "id": self.id,
            "gateway_id": str(self.gateway_id) if self.gateway_id else None,
            "order_id": str(self.order_id) if self.order_id else None,
            "amount": self.amount,
            "paid_amount": self.paid_amount,
            "canceled_amount": self.canceled_amount,
            "refunded_amount": self.refunded_amount,
            "code": self.code,
            "status": self._status.value,
        }
