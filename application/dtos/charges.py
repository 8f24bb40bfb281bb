"""
Charge DTOs (Pydantic v2) used at application/API boundaries.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.charge.entity import Charge


class ChargeSnapshot(BaseModel):
    """Serializable snapshot of a Charge.

    Dumped with ``by_alias=True`` the keys are camelCase and the gateway id is
    exposed as ``mundipaggId``. The last transaction is not part of it.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = None
    gateway_id: Optional[str] = Field(default=None, alias="mundipaggId")
    order_id: Optional[str] = None
    amount: int
    paid_amount: int
    canceled_amount: int
    refunded_amount: int
    code: Optional[str] = None
    status: str

    @classmethod
    def from_entity(cls, charge: Charge) -> "ChargeSnapshot":
        return cls.model_validate(charge.to_snapshot())


class PayChargeRequest(BaseModel):
    amount: int = Field(ge=0)


class CancelChargeRequest(BaseModel):
    amount: int = Field(default=0, ge=0)


class TransactionPayload(BaseModel):
    """Transaction as reported by the gateway."""

    id: str = Field(description="Gateway transaction id (tran_...)")
    transaction_type: str = "credit_card"
    status: str = "pending"
    amount: int = 0
    paid_amount: Optional[int] = None
    acquirer_message: Optional[str] = None
    created_at: Optional[datetime] = None


class ChargeWebhookData(BaseModel):
    id: str = Field(description="Gateway charge id (ch_...)")
    code: Optional[str] = None
    amount: Optional[int] = None
    paid_amount: Optional[int] = None
    canceled_amount: Optional[int] = None
    status: Optional[str] = None
    last_transaction: Optional[TransactionPayload] = None


class ChargeWebhookEvent(BaseModel):
    """Gateway webhook envelope, e.g. ``{"id": "hook_...", "type": "charge.paid", "data": {...}}``."""

    id: str
    type: str
    data: ChargeWebhookData
    raw: Optional[dict[str, Any]] = Field(default=None, exclude=True)

    @property
    def entity(self) -> str:
        return self.type.split(".", 1)[0]

    @property
    def action(self) -> str:
        parts = self.type.split(".", 1)
        return parts[1] if len(parts) == 2 else ""
