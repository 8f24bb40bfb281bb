"""Charge domain exports."""
from .entity import Charge, ChargeStatus
from .repository import ChargeRepository
from .transaction import Transaction, TransactionStatus, TransactionType
from .value_objects import ChargeId, CustomerId, OrderId, TransactionId

__all__ = [
    "Charge",
    "ChargeStatus",
    "ChargeRepository",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "ChargeId",
    "CustomerId",
    "OrderId",
    "TransactionId",
]
