"""Infrastructure models package exports."""
from .base import Base, metadata
from .charge import ChargeModel, TransactionModel

__all__ = [
    "Base",
    "metadata",
    "ChargeModel",
    "TransactionModel",
]
