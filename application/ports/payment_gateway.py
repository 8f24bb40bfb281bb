"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from application.dtos.payments import CreatePaymentRequest, GatewayChargeResult


@runtime_checkable
class ChargeGateway(Protocol):
    """Remote gateway calls needed by the charge use-cases.

    Implementations should be async and side-effect free beyond IO.
    """

    provider: str

    async def create_payment(self, order_code: str, req: CreatePaymentRequest) -> GatewayChargeResult: ...

    async def capture_charge(self, gateway_id: str, amount: int) -> GatewayChargeResult: ...

    async def cancel_charge(self, gateway_id: str, amount: int) -> GatewayChargeResult: ...

    async def aclose(self) -> None: ...
