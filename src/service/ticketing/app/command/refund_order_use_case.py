from typing import Optional, Self, Sequence
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import CustomBaseError, DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.ticketing_result import RefundResult
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_ticket_notifier import ITicketNotifier
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.payment_entity import PaymentEntity
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_errors import (
    EventNotFoundError,
    OrderNotFoundError,
    RefundNotAllowedError,
    RefundProcessorError,
)


class RefundOrderUseCase:
    """
    Refund Processor

    Flow:
    1. Reserve: under the order row lock, validate and insert a PENDING refund.
       Pending refunds count against the refundable amount, so a concurrent
       request for the same order sees the reservation and is rejected.
    2. Call the processor; no transaction is open during the remote call
    3. Settle: COMPLETED plus order, payment and tickets in one unit of work,
       or FAILED when the processor rejected the refund
    4. Refund e-mail, best-effort

    Tier sold_quantity is never decremented: a refunded seat is not resold.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        payment_gateway: IPaymentGateway,
        ticket_notifier: ITicketNotifier,
    ) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.ticket_notifier = ticket_notifier
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        ticket_notifier: ITicketNotifier = Depends(Provide[Container.ticket_notifier]),
    ) -> Self:
        return cls(uow=uow, payment_gateway=payment_gateway, ticket_notifier=ticket_notifier)

    @Logger.io
    async def refund_order(
        self,
        *,
        order_id: UUID,
        organizer_id: int,
        amount: Optional[int] = None,
        reason: Optional[str] = None,
        ticket_ids: Optional[Sequence[UUID]] = None,
    ) -> RefundResult:
        """
        Args:
            order_id: Order to refund
            organizer_id: Organizer requesting the refund; must own the event
            amount: Minor units; defaults to everything not yet refunded or reserved
            reason: Free text; a default is recorded when empty
            ticket_ids: Tickets to invalidate; None means every ticket of the order

        Raises:
            RefundNotAllowedError: order state, missing payment, bad amount or
                another refund already holding the remaining amount
            RefundProcessorError: processor rejected the refund (recorded as FAILED)
        """
        with self.tracer.start_as_current_span(
            'use_case.refund_order',
            attributes={'order.id': str(order_id), 'organizer.id': organizer_id},
        ):
            try:
                order, payment, refund, selected = await self._reserve(
                    order_id=order_id,
                    organizer_id=organizer_id,
                    amount=amount,
                    reason=reason,
                    ticket_ids=ticket_ids,
                )
            except CustomBaseError:
                metrics.record_refund(result='rejected')
                raise

            try:
                receipt = await self.payment_gateway.refund(
                    external_reference=payment.external_reference or '',
                    amount=refund.amount,
                    metadata={
                        'order_id': str(order_id),
                        'refund_id': str(refund.id),
                        'refunded_by': str(organizer_id),
                    },
                )
            except RefundProcessorError:
                metrics.record_refund(result='processor_error')
                await self._release(refund=refund)
                raise

            Logger.base.info(
                f'💸 [REFUND] Processor accepted {refund.amount} {order.currency} '
                f'for order {order_id} ({receipt.external_reference})'
            )

            try:
                result, event = await self._settle(
                    refund=refund.complete(external_reference=receipt.external_reference),
                    selected=selected,
                )
            except Exception as e:
                # Money already went back to the buyer; the PENDING row keeps holding the amount
                Logger.base.critical(
                    f'🚨 [REFUND] Refund {receipt.external_reference} for order {order_id} '
                    f'was issued but not recorded (refund {refund.id} left pending): '
                    f'{type(e).__name__}: {e}'
                )
                metrics.record_refund(result='failed')
                raise

            metrics.record_refund(
                result='completed', amount=refund.amount, currency=order.currency
            )

            notification_sent = False
            if result.order.buyer_email and event is not None:
                notification_sent = await self.ticket_notifier.send_refund_notice(
                    to=result.order.buyer_email,
                    order=result.order,
                    refund=result.refund,
                    event=event,
                )
            return RefundResult(
                refund=result.refund,
                order=result.order,
                refunded_total=result.refunded_total,
                refunded_ticket_ids=result.refunded_ticket_ids,
                notification_sent=notification_sent,
            )

    async def _reserve(
        self,
        *,
        order_id: UUID,
        organizer_id: int,
        amount: Optional[int],
        reason: Optional[str],
        ticket_ids: Optional[Sequence[UUID]],
    ) -> tuple[OrderEntity, PaymentEntity, RefundEntity, frozenset[UUID]]:
        async with self.uow:
            order = await self.uow.orders.get_by_id_for_update(order_id=order_id)
            if order is None:
                raise OrderNotFoundError()

            event = await self.uow.events.get_by_id(event_id=order.event_id)
            if event is None:
                raise EventNotFoundError()
            event.ensure_owned_by(organizer_id)

            order.ensure_refundable()

            payment = await self.uow.payments.get_by_order_id(order_id=order_id)
            if payment is None or not payment.is_captured:
                raise RefundNotAllowedError('No completed payment found for this order')

            reserved = await self.uow.refunds.sum_reserved_by_order(order_id=order_id)
            refundable = order.total_amount - reserved
            if amount is None and refundable <= 0:
                raise RefundNotAllowedError(
                    'A refund for the remaining amount is already in progress'
                )
            refund_amount = refundable if amount is None else amount
            if refund_amount <= 0:
                raise RefundNotAllowedError('Refund amount must be positive')
            if refund_amount > refundable:
                raise RefundNotAllowedError('Refund amount exceeds order total')

            tickets = await self.uow.tickets.list_by_order(order_id=order_id)
            order_ticket_ids = {ticket.id for ticket in tickets}
            if ticket_ids is None:
                selected = frozenset(order_ticket_ids)
            else:
                unknown = set(ticket_ids) - order_ticket_ids
                if unknown:
                    raise DomainError(
                        'Tickets do not belong to this order: '
                        + ', '.join(sorted(str(ticket_id) for ticket_id in unknown))
                    )
                selected = frozenset(ticket_ids)

            refund = await self.uow.refunds.create(
                refund=RefundEntity.reserve(
                    order_id=order_id,
                    amount=refund_amount,
                    reason=reason,
                    processed_by=organizer_id,
                )
            )
            await self.uow.commit()

        Logger.base.info(
            f'💸 [REFUND] Reserved {refund_amount} of {refundable} {order.currency} '
            f'on order {order_id} (refund {refund.id})'
        )
        return order, payment, refund, selected

    async def _release(self, *, refund: RefundEntity) -> None:
        async with self.uow:
            await self.uow.refunds.update(refund=refund.fail())
            await self.uow.commit()
        Logger.base.warning(
            f'⚠️ [REFUND] Processor rejected refund {refund.id} for order {refund.order_id}; '
            f'{refund.amount} released'
        )

    async def _settle(
        self, *, refund: RefundEntity, selected: frozenset[UUID]
    ) -> tuple[RefundResult, Optional[EventEntity]]:
        order_id = refund.order_id
        async with self.uow:
            order = await self.uow.orders.get_by_id_for_update(order_id=order_id)
            if order is None:
                raise OrderNotFoundError()

            await self.uow.refunds.update(refund=refund)
            refunded_total = await self.uow.refunds.sum_completed_by_order(order_id=order_id)

            updated_order = order.apply_refund(refunded_total=refunded_total)
            await self.uow.orders.update(order=updated_order)

            payment = await self.uow.payments.get_by_order_id(order_id=order_id)
            if payment is not None:
                await self.uow.payments.update(payment=payment.mark_refunded())

            # Row locks so a concurrent check-in cannot overwrite the refund
            tickets = await self.uow.tickets.list_by_order_for_update(order_id=order_id)
            refunded = [
                ticket.mark_refunded()
                for ticket in tickets
                if ticket.id in selected and ticket.status != TicketStatus.REFUNDED
            ]
            await self.uow.tickets.update_many(tickets=refunded)

            event = await self.uow.events.get_by_id(event_id=order.event_id)
            await self.uow.commit()

        Logger.base.info(
            f'💸 [REFUND] Order {order_id} now {updated_order.status}, '
            f'{len(refunded)} tickets refunded'
        )
        result = RefundResult(
            refund=refund,
            order=updated_order,
            refunded_total=refunded_total,
            refunded_ticket_ids=tuple(ticket.id for ticket in refunded),
            notification_sent=False,
        )
        return result, event
