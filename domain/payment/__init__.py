"""Outbound payment domain exports."""
from .entity import (
    AbstractCreditCardPayment,
    Customer,
    NewCardPayment,
    NewCreditCardPayment,
    NewVoucherPayment,
    PaymentOrder,
    SavedCreditCardPayment,
)
from .value_objects import CardId, CardToken, PaymentMethod

__all__ = [
    "AbstractCreditCardPayment",
    "Customer",
    "NewCardPayment",
    "NewCreditCardPayment",
    "NewVoucherPayment",
    "PaymentOrder",
    "SavedCreditCardPayment",
    "CardId",
    "CardToken",
    "PaymentMethod",
]
