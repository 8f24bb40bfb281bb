"""
费用仓储接口 - 定义费用数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from .entity import Charge
from .value_objects import ChargeId, OrderId


class ChargeRepository(ABC):
    """费用仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def get_by_id(self, charge_id: int) -> Optional[Charge]:
        """根据本地ID获取费用（含交易）"""
        pass

    @abstractmethod
    async def get_by_gateway_id(self, gateway_id: ChargeId) -> Optional[Charge]:
        """根据网关费用ID获取费用（含交易）"""
        pass

    @abstractmethod
    async def list_by_order(self, order_id: OrderId) -> List[Charge]:
        """获取订单下的全部费用"""
        pass

    @abstractmethod
    async def save(self, charge: Charge) -> Charge:
        """新增或更新费用及其交易，返回带本地ID的实体"""
        pass
