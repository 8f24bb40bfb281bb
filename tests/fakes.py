"""In-memory doubles shared by the test-suite."""
from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Optional

from application.dtos.payments import CreatePaymentRequest, GatewayChargeResult
from domain.charge.entity import Charge
from domain.charge.repository import ChargeRepository
from domain.charge.transaction import Transaction
from domain.charge.value_objects import ChargeId, OrderId
from domain.common.unit_of_work import AbstractUnitOfWork


BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def gid(prefix: str, n: int) -> str:
    """Well-formed gateway id, e.g. gid("ch", 1) -> 'ch_0000000000000001'."""
    return f"{prefix}_{n:016d}"


def make_transaction(n: int, *, at: int = 0, id: Optional[int] = None, **kwargs) -> Transaction:
    return Transaction(
        id=id,
        gateway_id=gid("tran", n),
        created_at=BASE_TIME + timedelta(seconds=at),
        **kwargs,
    )


def make_charge(n: int = 1, amount: int = 1000, **kwargs) -> Charge:
    kwargs.setdefault("order_id", gid("or", n))
    return Charge(gateway_id=gid("ch", n), amount=amount, **kwargs)


class InMemoryChargeRepository(ChargeRepository):
    def __init__(self) -> None:
        self.rows: dict[int, Charge] = {}
        self._next_id = 1
        self._next_tx_id = 1
        self.saves = 0

    async def get_by_id(self, charge_id: int) -> Optional[Charge]:
        row = self.rows.get(charge_id)
        return copy.deepcopy(row) if row else None

    async def get_by_gateway_id(self, gateway_id: ChargeId) -> Optional[Charge]:
        for row in self.rows.values():
            if row.gateway_id == gateway_id:
                return copy.deepcopy(row)
        return None

    async def list_by_order(self, order_id: OrderId) -> list[Charge]:
        return [copy.deepcopy(r) for r in self.rows.values() if r.order_id == order_id]

    async def save(self, charge: Charge) -> Charge:
        self.saves += 1
        stored = copy.deepcopy(charge)
        if stored.id is None:
            stored.id = self._next_id
            self._next_id += 1
        for transaction in stored._transactions:
            if transaction.id is None:
                transaction.id = self._next_tx_id
                self._next_tx_id += 1
        self.rows[stored.id] = stored
        return copy.deepcopy(stored)

    def add(self, charge: Charge) -> Charge:
        """Synchronous seeding helper."""
        charge.id = self._next_id
        self._next_id += 1
        self.rows[charge.id] = copy.deepcopy(charge)
        return charge


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(self, repo: InMemoryChargeRepository, *, readonly: bool = False) -> None:
        super().__init__(readonly=readonly)
        self.charge_repository = repo
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True
        self._committed = True

    async def rollback(self) -> None:
        self.rolled_back = True


class StubGateway:
    """ChargeGateway double recording calls and returning canned results."""

    provider = "stub"

    def __init__(self, *, paid_amount: Optional[int] = None, refunded_amount: Optional[int] = None,
                 last_transaction: Optional[dict] = None, error: Optional[Exception] = None) -> None:
        self.paid_amount = paid_amount
        self.refunded_amount = refunded_amount
        self.last_transaction = last_transaction
        self.error = error
        self.calls: list[tuple] = []
        self.closed = False

    async def create_payment(self, order_code: str, req: CreatePaymentRequest) -> GatewayChargeResult:
        self.calls.append(("create", order_code, req))
        return GatewayChargeResult(gateway_id=gid("ch", 99), status="pending", amount=req.amount)

    async def capture_charge(self, gateway_id: str, amount: int) -> GatewayChargeResult:
        self.calls.append(("capture", gateway_id, amount))
        if self.error:
            raise self.error
        return GatewayChargeResult(
            gateway_id=gateway_id,
            status="paid",
            paid_amount=self.paid_amount if self.paid_amount is not None else amount,
            last_transaction=self.last_transaction,
        )

    async def cancel_charge(self, gateway_id: str, amount: int) -> GatewayChargeResult:
        self.calls.append(("cancel", gateway_id, amount))
        if self.error:
            raise self.error
        return GatewayChargeResult(
            gateway_id=gateway_id,
            status="canceled",
            refunded_amount=self.refunded_amount,
            last_transaction=self.last_transaction,
        )

    async def aclose(self) -> None:
        self.closed = True
