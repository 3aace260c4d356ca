from typing import List, Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.order_entity import OrderEntity


class ListMyOrdersUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_my_orders(self, *, buyer_id: int) -> List[OrderEntity]:
        async with self.uow:
            return await self.uow.orders.list_by_buyer(buyer_id=buyer_id)
