"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Any, Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        message_key: str | None = None,
        format_params: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
            message_key=message_key or "validation.domain",
            format_params=format_params,
        )


class InvalidParamException(DomainValidationException):
    """调用方传入结构非法的值（负金额、分期数小于1、非法网关ID等）"""

    def __init__(
        self,
        message: str,
        value: Any = None,
        *,
        field: str | None = None,
        message_key: str | None = None,
    ):
        self.value = value
        super().__init__(
            message,
            field=field,
            details={"value": value},
            message_key=message_key or "validation.param.invalid",
            format_params={"value": value},
        )
        self.error_type = "InvalidParam"


class InvalidOperationException(BusinessException):
    """在非法状态下尝试状态迁移"""

    def __init__(
        self,
        message: str,
        *,
        details: dict | None = None,
        message_key: str | None = None,
    ):
        super().__init__(
            code=BusinessCode.INVALID_OPERATION,
            message=message,
            error_type="InvalidOperation",
            details=details,
            field="status",
            message_key=message_key or "operation.invalid",
            format_params=details,
        )


class ChargeNotFoundException(BusinessException):
    def __init__(self, charge_id: Optional[str] = None):
        details = {"charge_id": charge_id} if charge_id else None
        super().__init__(
            code=BusinessCode.CHARGE_NOT_FOUND,
            message="Charge not found",
            error_type="ChargeNotFound",
            details=details,
            message_key="charge.not_found",
        )


class GatewayUnavailableException(BusinessException):
    """未配置支付网关时发起远程调用"""

    def __init__(self, message: str = "Payment gateway is not configured"):
        super().__init__(
            code=BusinessCode.SERVICE_UNAVAILABLE,
            message=message,
            error_type="GatewayUnavailable",
            message_key="payment.gateway.unavailable",
        )
