"""
Outbound card payments - builders for the gateway payment request.

Each payment turns into a primitive ``CreatePaymentRequest``. Module
configuration (e.g. whether cards may be saved) is injected so this layer
stays free of infrastructure imports.
"""
from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Protocol

from application.dtos.payments import CreateCardPaymentRequest, CreatePaymentRequest
from domain.charge.value_objects import CustomerId
from domain.common.exceptions import InvalidParamException

from .value_objects import AbstractCardIdentifier, CardId, CardToken, PaymentMethod


class CardConfig(Protocol):
    """Per-method module configuration (see core.settings.CardSettings)."""

    save_cards: bool
    statement_descriptor: Optional[str]
    max_installments: int


@dataclass
class Customer:
    id: Optional[CustomerId] = None
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class PaymentOrder:
    """The platform order a payment is being built for."""

    code: str
    customer: Optional[Customer] = None


class AbstractCreditCardPayment(ABC):
    """Common behaviour of every card-backed payment."""

    method: ClassVar[PaymentMethod] = PaymentMethod.CREDIT_CARD

    def __init__(self, amount: int, *, config: CardConfig) -> None:
        if amount < 0:
            raise InvalidParamException(
                "Amount should be greater or equal to 0!",
                amount,
                field="amount",
                message_key="charge.amount.negative",
            )
        self.amount = amount
        self.config = config
        self.order: Optional[PaymentOrder] = None
        self.statement_descriptor: Optional[str] = config.statement_descriptor
        self.capture = True
        self._installments = 1
        self._identifier: Optional[AbstractCardIdentifier] = None

    @classmethod
    def base_code(cls) -> str:
        return cls.method.value

    @property
    def customer(self) -> Optional[Customer]:
        return self.order.customer if self.order else None

    @property
    def installments(self) -> int:
        return self._installments

    @installments.setter
    def installments(self, installments: int) -> None:
        if installments < 1:
            raise InvalidParamException(
                "Installments should be at least 1",
                installments,
                field="installments",
                message_key="payment.installments.invalid",
            )
        if self.config.max_installments and installments > self.config.max_installments:
            raise InvalidParamException(
                f"Installments should be at most {self.config.max_installments}",
                installments,
                field="installments",
                message_key="payment.installments.too_many",
            )
        self._installments = installments

    @property
    def identifier(self) -> Optional[AbstractCardIdentifier]:
        return self._identifier

    def set_identifier(self, identifier: AbstractCardIdentifier) -> None:
        self._identifier = identifier

    def _metadata(self) -> Optional[dict[str, Any]]:
        return None

    def _card_request(self) -> CreateCardPaymentRequest:
        return CreateCardPaymentRequest(
            installments=self.installments,
            statement_descriptor=self.statement_descriptor,
            capture=self.capture,
        )

    def to_request(self) -> CreatePaymentRequest:
        """Convert to the primitive request understood by the gateway."""
        card = self._card_request()
        return CreatePaymentRequest(
            payment_method=self.base_code(),
            amount=self.amount,
            credit_card=card if self.method != PaymentMethod.VOUCHER else None,
            voucher=card if self.method == PaymentMethod.VOUCHER else None,
            metadata=self._metadata(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "payment_method": self.base_code(),
            "amount": self.amount,
            "installments": self.installments,
            "statement_descriptor": self.statement_descriptor,
            "capture": self.capture,
            "order_code": self.order.code if self.order else None,
        }


class NewCardPayment(AbstractCreditCardPayment):
    """Payment with a fresh card token that may be saved on success."""

    def __init__(self, amount: int, *, config: CardConfig) -> None:
        super().__init__(amount, config=config)
        self._save_on_success = False

    def is_save_on_success(self) -> bool:
        if self.order is None:
            return False
        if not self.config.save_cards:
            return False
        if self.customer is None:
            return False
        return self._save_on_success

    def set_save_on_success(self, save_on_success: Any) -> None:
        self._save_on_success = bool(save_on_success)

    def set_card_token(self, card_token: CardToken) -> None:
        self.set_identifier(card_token)

    def _metadata(self) -> Optional[dict[str, Any]]:
        return {"saveOnSuccess": self.is_save_on_success()}

    def _card_request(self) -> CreateCardPaymentRequest:
        request = super()._card_request()
        request.card_token = self.identifier.value if self.identifier else None
        return request

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["card_token"] = self.identifier.value if self.identifier else None
        return data


class NewCreditCardPayment(NewCardPayment):
    method = PaymentMethod.CREDIT_CARD


class NewVoucherPayment(NewCardPayment):
    method = PaymentMethod.VOUCHER


class SavedCreditCardPayment(AbstractCreditCardPayment):
    """Payment charged against a card already stored for the customer."""

    method = PaymentMethod.CREDIT_CARD

    def set_card_id(self, card_id: CardId) -> None:
        self.set_identifier(card_id)

    def _card_request(self) -> CreateCardPaymentRequest:
        request = super()._card_request()
        request.card_id = self.identifier.value if self.identifier else None
        return request

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["card_id"] = self.identifier.value if self.identifier else None
        return data
