from typing import Optional, Self

from fastapi import Depends
from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.payment_dto import PaymentFailed
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.enum.order_status import PaymentStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class FailPaymentUseCase:
    """
    Close a checkout that will never be paid (session expired, async payment failed)

    Pending order -> cancelled, pending payment -> failed, pending tickets ->
    cancelled. Anything not pending is left alone, so replays are no-ops.
    Nothing here touches sold_quantity: pending tickets never consumed it.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    def depends(cls, uow: AbstractUnitOfWork = Depends(get_unit_of_work)) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def fail_payment(self, *, signal: PaymentFailed) -> Optional[OrderEntity]:
        with self.tracer.start_as_current_span(
            'use_case.fail_payment',
            attributes={
                'order.id': str(signal.order_id),
                'payment.reason': signal.reason,
                'payment.final': signal.final,
            },
        ):
            if not signal.final:
                # Declined card inside an open session; the buyer can retry
                Logger.base.info(
                    f'💳 [PAYMENT] Attempt for order {signal.order_id} declined: {signal.reason}'
                )
                metrics.record_payment_confirmation(result='declined')
                return None

            async with self.uow:
                order = await self.uow.orders.get_by_id_for_update(order_id=signal.order_id)
                if order is None:
                    Logger.base.warning(
                        f'⚠️ [PAYMENT] Failure signal for unknown order {signal.order_id}'
                    )
                    return None
                if not order.is_pending:
                    return order

                cancelled = order.cancel()
                await self.uow.orders.update(order=cancelled)

                payment = await self.uow.payments.get_by_order_id(order_id=order.id)
                if payment is not None and payment.status == PaymentStatus.PENDING:
                    await self.uow.payments.update(payment=payment.fail())

                tickets = await self.uow.tickets.list_by_order_for_update(order_id=order.id)
                await self.uow.tickets.update_many(
                    tickets=[t.cancel() for t in tickets if t.status == TicketStatus.PENDING]
                )
                await self.uow.commit()

            metrics.record_payment_confirmation(result='cancelled')
            Logger.base.info(
                f'🚫 [PAYMENT] Order {order.id} cancelled ({signal.reason})'
            )
            return cancelled
