"""
Gateway identifiers used by the charge aggregate.

Remote ids have the shape ``<prefix>_<16 alphanumerics>``, e.g.
``ch_Ab12Cd34Ef56Gh78``. They are value objects: two instances wrapping the
same string are equal.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from domain.common.exceptions import InvalidParamException


@dataclass(frozen=True)
class AbstractGatewayId:
    value: str

    prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.validate(self.value):
            raise InvalidParamException(
                f"Invalid {type(self).__name__}: {self.value!r}",
                self.value,
                field="id",
                message_key="validation.gateway_id.invalid",
            )

    @classmethod
    def validate(cls, value: str) -> bool:
        return re.fullmatch(rf"{cls.prefix}_[A-Za-z0-9]{{16}}", value) is not None

    def equals(self, other: object) -> bool:
        return self == other

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OrderId(AbstractGatewayId):
    prefix: ClassVar[str] = "or"


@dataclass(frozen=True)
class ChargeId(AbstractGatewayId):
    prefix: ClassVar[str] = "ch"


@dataclass(frozen=True)
class TransactionId(AbstractGatewayId):
    prefix: ClassVar[str] = "tran"


@dataclass(frozen=True)
class CustomerId(AbstractGatewayId):
    prefix: ClassVar[str] = "cus"
