"""
Payment-related settings using pydantic-settings v2 with nested env keys.

This module is isolated so core.config.Settings stays focused on the app.
Example: ``PAYMENT__VOUCHER__SAVE_CARDS=true``.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentTimeouts(BaseModel):
    connect: float = 1.0
    read: float = 3.0
    write: float = 3.0
    total: float = 5.0


class PaymentRetry(BaseModel):
    max: int = 2
    base_backoff: float = 0.2


class GatewaySettings(BaseModel):
    base_url: str = "https://api.mundipagg.com/core/v1"
    secret_key: Optional[str] = None


class CardSettings(BaseModel):
    """Module configuration of a card-backed payment method."""

    enabled: bool = True
    save_cards: bool = False
    statement_descriptor: Optional[str] = None
    max_installments: int = 12


class PaymentSettings(BaseSettings):
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    retry: PaymentRetry = Field(default_factory=PaymentRetry)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)

    credit_card: CardSettings = Field(default_factory=CardSettings)
    voucher: CardSettings = Field(default_factory=lambda: CardSettings(max_installments=1))

    model_config = SettingsConfigDict(
        env_prefix="PAYMENT__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
