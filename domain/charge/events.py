"""
Charge domain events.

Dataclass events record ledger transitions for downstream handling
(e.g., order status updates, notifications). Domain remains free of
infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


@dataclass
class ChargeEvent:
    charge_id: Optional[str]
    order_id: Optional[str]
    amount: int = 0
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ChargePaid(ChargeEvent):
    canceled_amount: int = 0


@dataclass
class ChargeCanceled(ChargeEvent):
    pass


@dataclass
class ChargeRefunded(ChargeEvent):
    pass
