"""
Factory for payment gateway clients.
"""
from __future__ import annotations

from typing import Optional

from core.settings import payment_settings
from application.ports.payment_gateway import ChargeGateway


def get_payment_gateway(provider: Optional[str] = None) -> Optional[ChargeGateway]:
    """Return the configured gateway client, or None when no secret key is set."""
    name = (provider or "mundipagg").lower()
    if name not in {"mundipagg", "gateway"}:
        raise ValueError(f"Unsupported payment provider: {name}")
    if not payment_settings.gateway.secret_key:
        return None
    from .gateway_client import GatewayPaymentClient
    return GatewayPaymentClient()
