from typing import Self

from fastapi import Depends

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_read_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.value_object.payout_summary import PayoutSummary


class GetPayoutSummaryUseCase:
    """
    Organizer balance: earnings across all of the organizer's events,
    net of completed refunds, against the payout ledger.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_read_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def get_summary(self, *, organizer_id: int) -> PayoutSummary:
        async with self.uow:
            events = await self.uow.events.list_by_organizer(organizer_id=organizer_id)
            event_ids = [event.id for event in events if event.id is not None]

            gross_sales = await self.uow.orders.sum_sales_by_events(event_ids=event_ids)
            refunded = await self.uow.refunds.sum_completed_by_events(event_ids=event_ids)
            payouts = await self.uow.payouts.list_by_organizer(organizer_id=organizer_id)

        summary = PayoutSummary.from_ledger(
            gross_sales=gross_sales, refunded=refunded, payouts=payouts
        )
        Logger.base.info(
            f'🏦 [PAYOUTS] Organizer {organizer_id}: earned {summary.total_earnings} over '
            f'{len(event_ids)} events, available {summary.available_balance}'
        )
        return summary
