"""
Payment request DTOs (Pydantic v2) sent to the remote gateway.

Field names follow the gateway's snake_case wire format.
"""
from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class CreateCardPaymentRequest(BaseModel):
    installments: int = Field(default=1, ge=1)
    statement_descriptor: Optional[str] = Field(default=None, max_length=22)
    capture: bool = True
    card_token: Optional[str] = None
    card_id: Optional[str] = None


class CreatePaymentRequest(BaseModel):
    payment_method: str
    amount: int = Field(ge=0)
    credit_card: Optional[CreateCardPaymentRequest] = None
    voucher: Optional[CreateCardPaymentRequest] = None
    metadata: Optional[dict[str, Any]] = None
    idempotency_key: Optional[str] = Field(default=None, exclude=True)


class NewCardPaymentInput(BaseModel):
    """Primitive input used by the application to build a card/voucher payment."""

    order_code: str
    amount: int = Field(ge=0)
    card_token: str
    installments: int = 1
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    save_on_success: bool = False
    statement_descriptor: Optional[str] = None
    capture: bool = True

    @field_validator("order_code")
    @classmethod
    def _strip_order_code(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("order_code must not be empty")
        return v


class GatewayChargeResult(BaseModel):
    """Gateway answer for capture/cancel/create calls."""

    gateway_id: str
    status: str
    amount: int = 0
    paid_amount: Optional[int] = None
    canceled_amount: Optional[int] = None
    refunded_amount: Optional[int] = None
    last_transaction: Optional[dict[str, Any]] = None
