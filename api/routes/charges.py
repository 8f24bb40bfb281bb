"""
Charges API routes.

Thin layer over ChargeApplicationService: validate input with DTOs, call the
use-case, wrap the snapshot in the unified response.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_charge_service
from application.dtos.charges import (
    CancelChargeRequest,
    ChargeWebhookEvent,
    PayChargeRequest,
    TransactionPayload,
)
from application.services.charge_service import ChargeApplicationService
from core.i18n import t
from core.response import success_response


router = APIRouter(prefix="/charges", tags=["Charges"])


def _dump(snapshot) -> dict:
    return snapshot.model_dump(by_alias=True)


@router.post("/webhooks")
async def charge_webhook(
    event: ChargeWebhookEvent,
    service: ChargeApplicationService = Depends(get_charge_service),
):
    """网关 webhook；不支持的事件也返回 200，避免网关重复投递"""
    result = await service.handle_webhook(event)
    charge = result["charge"]
    return success_response(
        data={"handled": result["handled"], "charge": _dump(charge) if charge else None},
        message=result["message"],
    )


@router.get("")
async def list_charges(
    order_id: str = Query(..., description="Gateway order id (or_...)"),
    service: ChargeApplicationService = Depends(get_charge_service),
):
    charges = await service.list_order_charges(order_id)
    return success_response(data=[_dump(c) for c in charges], message=t("charge.retrieved"))


@router.get("/{charge_id}")
async def get_charge(
    charge_id: str,
    service: ChargeApplicationService = Depends(get_charge_service),
):
    charge = await service.get_charge(charge_id)
    return success_response(data=_dump(charge), message=t("charge.retrieved"))


@router.post("/{charge_id}/pay")
async def pay_charge(
    charge_id: str,
    body: PayChargeRequest,
    remote: bool = Query(False, description="Capture on the gateway before updating the ledger"),
    service: ChargeApplicationService = Depends(get_charge_service),
):
    if remote:
        charge = await service.capture_charge(charge_id, body.amount)
    else:
        charge = await service.pay_charge(charge_id, body.amount)
    return success_response(data=_dump(charge), message=t("charge.paid"))


@router.post("/{charge_id}/cancel")
async def cancel_charge(
    charge_id: str,
    body: CancelChargeRequest,
    remote: bool = Query(False, description="Cancel on the gateway before updating the ledger"),
    service: ChargeApplicationService = Depends(get_charge_service),
):
    if remote:
        charge = await service.void_charge(charge_id, body.amount)
    else:
        charge = await service.cancel_charge(charge_id, body.amount)
    message = t("charge.refunded") if charge.status == "paid" else t("charge.canceled")
    return success_response(data=_dump(charge), message=message)


@router.post("/{charge_id}/transactions")
async def record_transaction(
    charge_id: str,
    body: TransactionPayload,
    service: ChargeApplicationService = Depends(get_charge_service),
):
    charge = await service.record_transaction(charge_id, body)
    return success_response(data=_dump(charge), message=t("charge.transaction.recorded"))
