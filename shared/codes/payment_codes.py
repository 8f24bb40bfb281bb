"""
Payment specific codes and gateway status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_RECOVERABLE = 60001
    TIMEOUT = 60003
    RATE_LIMITED = 60004


# Gateway charge status -> internal ChargeStatus value.
# Statuses missing from the map are not ledger-relevant and are ignored.
GATEWAY_CHARGE_STATUS_TO_INTERNAL = {
    "pending": "pending",
    "processing": "pending",
    "paid": "paid",
    "overpaid": "paid",
    "underpaid": "paid",
    "canceled": "canceled",
    "failed": "canceled",
}

# Webhook event action -> internal ChargeStatus value
WEBHOOK_ACTION_TO_INTERNAL = {
    "pending": "pending",
    "paid": "paid",
    "overpaid": "paid",
    "underpaid": "paid",
    "partial_canceled": "canceled",
    "canceled": "canceled",
    "refunded": "canceled",
    "payment_failed": "canceled",
}
