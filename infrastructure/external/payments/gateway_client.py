"""
Mundipagg-style REST gateway adapter built on httpx.

Endpoints used:
- ``POST /orders`` creates an order carrying one payment; the first charge of
  the returned order is mapped back.
- ``POST /charges/{id}/capture`` captures (part of) an authorized charge.
- ``DELETE /charges/{id}`` voids an authorization or refunds a paid charge.

Authentication is HTTP Basic with the secret key as username.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx

from application.dtos.payments import CreatePaymentRequest, GatewayChargeResult
from core.settings import PaymentSettings, payment_settings
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    PaymentProviderError,
    PaymentRecoverableError,
)
from shared.codes.payment_codes import PaymentCode


_TRANSACTION_FIELDS = ("id", "transaction_type", "status", "amount", "paid_amount", "acquirer_message", "created_at")


class GatewayPaymentClient(BasePaymentClient):
    provider = "mundipagg"

    def __init__(
        self,
        settings: Optional[PaymentSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        cfg = settings or payment_settings
        if not cfg.gateway.secret_key:
            raise RuntimeError("PAYMENT__GATEWAY__SECRET_KEY not configured")
        super().__init__(
            base_url=cfg.gateway.base_url,
            timeouts=cfg.timeouts.model_dump(),
            retry={"max": cfg.retry.max, "base": cfg.retry.base_backoff},
            transport=transport,
            auth=httpx.BasicAuth(cfg.gateway.secret_key, ""),
        )

    async def _request(self, method: str, path: str, *, json: Any = None, headers: Optional[dict] = None) -> dict:
        async with self.client() as http:
            try:
                resp = await self._retry(lambda: http.request(method, path, json=json, headers=headers))
            except httpx.TimeoutException as exc:
                raise PaymentRecoverableError(
                    f"Gateway timeout on {method} {path}",
                    provider=self.provider,
                    code=PaymentCode.TIMEOUT,
                ) from exc
            except httpx.TransportError as exc:
                raise PaymentRecoverableError(str(exc) or "Gateway unreachable", provider=self.provider) from exc

        self._log("gateway_response", method=method, path=path, status_code=resp.status_code)
        if resp.status_code == 429:
            raise PaymentRecoverableError(
                "Gateway rate limit reached",
                provider=self.provider,
                provider_code="429",
                code=PaymentCode.RATE_LIMITED,
            )
        if resp.status_code >= 500:
            raise PaymentRecoverableError(
                f"Gateway error {resp.status_code}",
                provider=self.provider,
                provider_code=str(resp.status_code),
            )
        if resp.status_code >= 400:
            body = self._safe_json(resp)
            raise PaymentProviderError(
                str(body.get("message") or f"Gateway rejected request ({resp.status_code})"),
                provider=self.provider,
                provider_code=str(resp.status_code),
                details={"errors": body.get("errors")} if body.get("errors") else None,
            )
        return self._safe_json(resp)

    @staticmethod
    def _safe_json(resp: httpx.Response) -> dict:
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _to_result(self, charge: dict) -> GatewayChargeResult:
        if not charge.get("id"):
            raise PaymentProviderError("Gateway response carries no charge", provider=self.provider)
        last = charge.get("last_transaction") or None
        if last:
            last = {k: last[k] for k in _TRANSACTION_FIELDS if last.get(k) is not None}
        return GatewayChargeResult(
            gateway_id=str(charge["id"]),
            status=self._map_status(str(charge.get("status", ""))),
            amount=int(charge.get("amount") or 0),
            paid_amount=charge.get("paid_amount"),
            canceled_amount=charge.get("canceled_amount"),
            refunded_amount=charge.get("refunded_amount"),
            last_transaction=last,
        )

    async def create_payment(self, order_code: str, req: CreatePaymentRequest) -> GatewayChargeResult:
        body = {
            "code": order_code,
            "payments": [req.model_dump(exclude_none=True)],
            "closed": True,
        }
        headers = {"Idempotency-Key": req.idempotency_key} if req.idempotency_key else None
        self._log("gateway_create_order", order_code=order_code, payment_method=req.payment_method)
        order = await self._request("POST", "/orders", json=body, headers=headers)
        charges = order.get("charges") or []
        if not charges:
            raise PaymentProviderError("Gateway order has no charges", provider=self.provider)
        return self._to_result(charges[0])

    async def capture_charge(self, gateway_id: str, amount: int) -> GatewayChargeResult:
        self._log("gateway_capture_charge", charge_id=gateway_id, amount=amount)
        charge = await self._request("POST", f"/charges/{gateway_id}/capture", json={"amount": amount})
        return self._to_result(charge)

    async def cancel_charge(self, gateway_id: str, amount: int) -> GatewayChargeResult:
        self._log("gateway_cancel_charge", charge_id=gateway_id, amount=amount)
        body = {"amount": amount} if amount else None
        charge = await self._request("DELETE", f"/charges/{gateway_id}", json=body)
        return self._to_result(charge)
