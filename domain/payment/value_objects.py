"""Payment value objects: method taxonomy and card identifiers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from domain.charge.value_objects import AbstractGatewayId


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    VOUCHER = "voucher"
    BOLETO = "boleto"


@dataclass(frozen=True)
class AbstractCardIdentifier(AbstractGatewayId):
    """Something the gateway accepts in place of raw card data."""


@dataclass(frozen=True)
class CardToken(AbstractCardIdentifier):
    """One-shot token produced by the gateway tokenizer."""

    prefix: ClassVar[str] = "token"


@dataclass(frozen=True)
class CardId(AbstractCardIdentifier):
    """Card previously saved on the customer's wallet."""

    prefix: ClassVar[str] = "card"
