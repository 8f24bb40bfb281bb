"""
Application service building outbound card/voucher payments.

Depends only on the ChargeGateway port and DTOs. Module configuration comes
from ``core.settings.payment_settings`` unless injected (tests).
"""
from __future__ import annotations

import hashlib
from typing import Optional

from application.dtos.payments import CreatePaymentRequest, GatewayChargeResult, NewCardPaymentInput
from application.ports.payment_gateway import ChargeGateway
from core.logging_config import get_logger
from core.settings import PaymentSettings, payment_settings
from domain.charge.value_objects import CustomerId
from domain.common.exceptions import GatewayUnavailableException, InvalidParamException
from domain.payment.entity import (
    Customer,
    NewCardPayment,
    NewCreditCardPayment,
    NewVoucherPayment,
    PaymentOrder,
)
from domain.payment.value_objects import CardToken, PaymentMethod


logger = get_logger(__name__)


def _ensure_idempotency_key(order_code: str, req: CreatePaymentRequest) -> None:
    if req.idempotency_key:
        return
    # Stable, reproducible key derived from business identifiers (no timestamp)
    card = req.credit_card or req.voucher
    token = (card.card_token or card.card_id or "") if card else ""
    base = f"create|{order_code}|{req.payment_method}|{req.amount}|{card.installments if card else 1}|{token}"
    req.idempotency_key = hashlib.sha256(base.encode("utf-8")).hexdigest()


def _unsupported(value: object) -> InvalidParamException:
    return InvalidParamException(
        f"Unsupported payment method: {value}",
        value,
        field="payment_method",
        message_key="payment.method.unsupported",
    )


def _coerce_method(method: PaymentMethod | str) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        raise _unsupported(method) from None


class PaymentRequestService:
    def __init__(self, gateway: Optional[ChargeGateway] = None, settings: Optional[PaymentSettings] = None) -> None:
        self.gateway = gateway
        self.settings = settings or payment_settings

    def build_payment(self, method: PaymentMethod, data: NewCardPaymentInput) -> NewCardPayment:
        """Primitive input -> configured payment builder."""
        method = _coerce_method(method)
        if method == PaymentMethod.VOUCHER:
            payment: NewCardPayment = NewVoucherPayment(data.amount, config=self.settings.voucher)
        elif method == PaymentMethod.CREDIT_CARD:
            payment = NewCreditCardPayment(data.amount, config=self.settings.credit_card)
        else:
            raise _unsupported(method.value)

        customer = None
        if data.customer_id or data.customer_name or data.customer_email:
            customer = Customer(
                id=CustomerId(data.customer_id) if data.customer_id else None,
                name=data.customer_name,
                email=data.customer_email,
            )
        payment.order = PaymentOrder(code=data.order_code, customer=customer)
        payment.installments = data.installments
        payment.capture = data.capture
        if data.statement_descriptor:
            payment.statement_descriptor = data.statement_descriptor
        payment.set_card_token(CardToken(data.card_token))
        payment.set_save_on_success(data.save_on_success)
        return payment

    def build_voucher_request(self, data: NewCardPaymentInput) -> CreatePaymentRequest:
        return self.build_payment(PaymentMethod.VOUCHER, data).to_request()

    def build_credit_card_request(self, data: NewCardPaymentInput) -> CreatePaymentRequest:
        return self.build_payment(PaymentMethod.CREDIT_CARD, data).to_request()

    async def submit(self, method: PaymentMethod, data: NewCardPaymentInput) -> GatewayChargeResult:
        if self.gateway is None:
            raise GatewayUnavailableException()
        req = self.build_payment(method, data).to_request()
        _ensure_idempotency_key(data.order_code, req)
        logger.info(
            "payment_create_request",
            order_code=data.order_code,
            payment_method=req.payment_method,
            provider=self.gateway.provider,
            idempotency_key=req.idempotency_key,
        )
        result = await self.gateway.create_payment(data.order_code, req)
        logger.info(
            "payment_create_response",
            order_code=data.order_code,
            provider=self.gateway.provider,
            charge_id=result.gateway_id,
            status=result.status,
        )
        return result

    async def aclose(self) -> None:
        # Best-effort close underlying resources
        close = getattr(self.gateway, "aclose", None)
        if callable(close):
            await close()
