"""
API依赖项 - 应用服务装配
"""
from typing import Optional

from fastapi import Request

from application.ports.payment_gateway import ChargeGateway
from application.services.charge_service import ChargeApplicationService
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


async def get_payment_gateway(request: Request) -> Optional[ChargeGateway]:
    """lifespan 中创建的网关客户端；未配置密钥时为 None"""
    return getattr(request.app.state, "payment_gateway", None)


async def get_charge_service(request: Request) -> ChargeApplicationService:
    gateway = await get_payment_gateway(request)
    return ChargeApplicationService(uow_factory=SQLAlchemyUnitOfWork, gateway=gateway)
