"""Transaction entity reported by the payment gateway for a charge."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .value_objects import ChargeId, TransactionId


class TransactionType(str, Enum):
    credit_card = "credit_card"
    debit_card = "debit_card"
    voucher = "voucher"
    boleto = "boleto"


class TransactionStatus(str, Enum):
    pending = "pending"
    authorized = "authorized_pending_capture"
    captured = "captured"
    partial_capture = "partial_capture"
    voided = "voided"
    refunded = "refunded"
    failed = "failed"


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Transaction:
    """A single event reported by the gateway against a charge.

    ``gateway_id`` is the remote identity used for deduplication, ``id`` is the
    local persistence identity (None until stored).
    """

    id: Optional[int]
    gateway_id: TransactionId
    transaction_type: TransactionType = TransactionType.credit_card
    status: TransactionStatus = TransactionStatus.pending
    amount: int = 0
    paid_amount: int = 0
    charge_id: Optional[ChargeId] = None
    acquirer_message: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.gateway_id, str):
            self.gateway_id = TransactionId(self.gateway_id)
        if isinstance(self.charge_id, str):
            self.charge_id = ChargeId(self.charge_id)
        self.transaction_type = TransactionType(self.transaction_type)
        self.status = TransactionStatus(self.status)
        self.created_at = _ensure_utc(self.created_at) or datetime.now(timezone.utc)
