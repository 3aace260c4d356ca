"""
Unit of Work Pattern

Architecture:
- UoW owns the session lifecycle and commit/rollback
- Repositories get the shared session from the UoW
- Use cases coordinate several repositories inside one `async with uow:`
  block, which is one database transaction
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.orm_db_setting import get_async_read_session, get_async_session


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_event_repo import IEventRepo
    from src.service.ticketing.app.interface.i_order_repo import IOrderRepo
    from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
    from src.service.ticketing.app.interface.i_payout_repo import IPayoutRepo
    from src.service.ticketing.app.interface.i_promo_code_repo import IPromoCodeRepo
    from src.service.ticketing.app.interface.i_refund_repo import IRefundRepo
    from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
    from src.service.ticketing.app.interface.i_ticket_tier_repo import ITicketTierRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the Ticketing Service

    Leaving the block without commit() rolls everything back, so a raised
    error never leaves partial state behind.

    Usage:
        async with uow:
            order = await uow.orders.get_by_id_for_update(order_id=...)
            ...
            await uow.commit()
    """

    events: IEventRepo
    tiers: ITicketTierRepo
    promo_codes: IPromoCodeRepo
    orders: IOrderRepo
    payments: IPaymentRepo
    tickets: ITicketRepo
    refunds: IRefundRepo
    payouts: IPayoutRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        from src.service.ticketing.driven_adapter.repo.event_repo_impl import EventRepoImpl
        from src.service.ticketing.driven_adapter.repo.order_repo_impl import OrderRepoImpl
        from src.service.ticketing.driven_adapter.repo.payment_repo_impl import PaymentRepoImpl
        from src.service.ticketing.driven_adapter.repo.payout_repo_impl import PayoutRepoImpl
        from src.service.ticketing.driven_adapter.repo.promo_code_repo_impl import (
            PromoCodeRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.refund_repo_impl import RefundRepoImpl
        from src.service.ticketing.driven_adapter.repo.ticket_repo_impl import TicketRepoImpl
        from src.service.ticketing.driven_adapter.repo.ticket_tier_repo_impl import (
            TicketTierRepoImpl,
        )

        # All repositories share one session, so one transaction
        self.events = EventRepoImpl(self.session)
        self.tiers = TicketTierRepoImpl(self.session)
        self.promo_codes = PromoCodeRepoImpl(self.session)
        self.orders = OrderRepoImpl(self.session)
        self.payments = PaymentRepoImpl(self.session)
        self.tickets = TicketRepoImpl(self.session)
        self.refunds = RefundRepoImpl(self.session)
        self.payouts = PayoutRepoImpl(self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args):
        await super().__aexit__(*args)
        # Session close is handled by the get_async_session context manager

    async def _commit(self):
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def get_unit_of_work(
    session: AsyncSession = Depends(get_async_session),
) -> AbstractUnitOfWork:
    """
    FastAPI dependency for Unit of Work

    Usage:
        async def refund(uow: AbstractUnitOfWork = Depends(get_unit_of_work)):
            async with uow:
                ...
                await uow.commit()
    """
    return SqlAlchemyUnitOfWork(session)


def get_read_unit_of_work(
    session: AsyncSession = Depends(get_async_read_session),
) -> AbstractUnitOfWork:
    """Unit of Work bound to the read replica session, for query use cases"""
    return SqlAlchemyUnitOfWork(session)
