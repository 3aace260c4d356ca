from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.payment_dto import PaymentSucceeded
from src.service.ticketing.app.dto.ticketing_result import (
    ConfirmPaymentResult,
    ConfirmPaymentStatus,
)
from src.service.ticketing.app.interface.i_credential_issuer import ICredentialIssuer
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_ticket_notifier import ITicketNotifier
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.payment_entity import PaymentEntity
from src.service.ticketing.domain.enum.order_status import OrderStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.inventory_guard import count_by_tier, ensure_all_available
from src.service.ticketing.domain.ticketing_errors import OrderNotFoundError


class ConfirmPaymentUseCase:
    """
    Order/Ticket Writer

    Turns a verified PaymentSucceeded signal into a completed order with
    confirmed, credentialed tickets. Everything is written in one unit of
    work: the order and payment, the tickets, tier sold_quantity and promo
    current_uses either all change or none do.

    Idempotency:
    - a payment already bound to the external reference means the signal
      was processed before
    - the order row lock makes a racing duplicate wait, after which it sees
      the order completed and reports ALREADY_PROCESSED as well
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        credential_issuer: ICredentialIssuer,
        ticket_notifier: ITicketNotifier,
        payment_gateway: Optional[IPaymentGateway] = None,
    ) -> None:
        self.uow = uow
        self.credential_issuer = credential_issuer
        self.ticket_notifier = ticket_notifier
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        credential_issuer: ICredentialIssuer = Depends(Provide[Container.credential_issuer]),
        ticket_notifier: ITicketNotifier = Depends(Provide[Container.ticket_notifier]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(
            uow=uow,
            credential_issuer=credential_issuer,
            ticket_notifier=ticket_notifier,
            payment_gateway=payment_gateway,
        )

    @Logger.io
    async def confirm_payment(self, *, signal: PaymentSucceeded) -> ConfirmPaymentResult:
        with self.tracer.start_as_current_span(
            'use_case.confirm_payment',
            attributes={
                'order.id': str(signal.order_id),
                'payment.external_reference': signal.external_reference,
                'payment.settled_amount': signal.settled_amount,
            },
        ):
            try:
                result, event, tier_names = await self._commit(signal=signal)
            except OrderNotFoundError:
                Logger.base.warning(
                    f'⚠️ [PAYMENT] Payment {signal.external_reference} references unknown '
                    f'order {signal.order_id}'
                )
                metrics.record_payment_confirmation(result='order_not_found')
                raise
            except Exception as e:
                # Money was captured but the order could not be fulfilled
                Logger.base.critical(
                    f'🚨 [PAYMENT] Captured payment {signal.external_reference} for order '
                    f'{signal.order_id} was not fulfilled: {type(e).__name__}: {e}'
                )
                metrics.record_payment_confirmation(result='failed')
                raise

            if result.status == ConfirmPaymentStatus.ALREADY_PROCESSED:
                Logger.base.info(
                    f'🔁 [PAYMENT] Payment {signal.external_reference} already processed '
                    f'for order {result.order.id}'
                )
                metrics.record_payment_confirmation(result='already_processed')
                return result

            metrics.record_payment_confirmation(result='confirmed')
            metrics.record_tickets_issued(event_id=result.order.event_id, count=len(result.tickets))
            Logger.base.info(
                f'✅ [PAYMENT] Order {result.order.id} completed, '
                f'{len(result.tickets)} tickets issued'
            )

            recipient = result.order.buyer_email or signal.customer_email
            if not recipient or event is None:
                return result

            notification_sent = await self.ticket_notifier.send_order_confirmation(
                to=recipient,
                order=result.order,
                event=event,
                tickets=result.tickets,
                tier_names=tier_names,
            )
            return ConfirmPaymentResult(
                status=result.status,
                order=result.order,
                tickets=result.tickets,
                notification_sent=notification_sent,
            )

    @Logger.io
    async def confirm_checkout_session(self, *, session_id: str) -> ConfirmPaymentResult:
        """
        Confirmation triggered by the buyer returning from the processor.

        Shares the commit path with the webhook, so whichever arrives second
        is an idempotent replay.
        """
        if self.payment_gateway is None:
            raise RuntimeError('Payment gateway not injected')

        signal = await self.payment_gateway.retrieve_checkout_session(session_id=session_id)
        if not isinstance(signal, PaymentSucceeded):
            raise DomainError('Payment not completed')
        return await self.confirm_payment(signal=signal)

    async def _commit(
        self, *, signal: PaymentSucceeded
    ) -> tuple[ConfirmPaymentResult, Optional[EventEntity], dict[int, str]]:
        async with self.uow:
            existing = await self.uow.payments.get_by_external_reference(
                external_reference=signal.external_reference
            )
            if existing is not None:
                return await self._already_processed(order_id=existing.order_id), None, {}

            order = await self.uow.orders.get_by_id_for_update(order_id=signal.order_id)
            if order is None:
                raise OrderNotFoundError()
            if order.status in (OrderStatus.COMPLETED, OrderStatus.REFUNDED):
                await self._flag_second_capture(order_id=order.id, signal=signal)
                return await self._already_processed(order_id=order.id), None, {}
            if order.status == OrderStatus.CANCELLED:
                raise DomainError('Order was cancelled before the payment was captured')

            tickets = await self.uow.tickets.list_by_order_for_update(order_id=order.id)
            pending = [ticket for ticket in tickets if ticket.status == TicketStatus.PENDING]
            quantities = count_by_tier(pending)

            # Authoritative inventory check, tier rows locked until commit
            tiers = await self.uow.tiers.list_by_ids_for_update(tier_ids=list(quantities))
            ensure_all_available(tiers=tiers, quantities=quantities)
            tiers_by_id = {tier.id: tier for tier in tiers}

            completed_order = order.complete(
                settled_amount=signal.settled_amount, settled_currency=signal.settled_currency
            )
            await self.uow.orders.update(order=completed_order)
            await self._complete_payment(order=order, signal=signal)

            buyer_email = order.buyer_email or signal.customer_email or ''
            confirmed = [
                ticket.with_attendee_defaults(email=buyer_email).confirm(
                    price=tiers_by_id[ticket.tier_id].base_price,
                    credential=self.credential_issuer.issue(ticket=ticket),
                )
                for ticket in pending
            ]
            await self.uow.tickets.update_many(tickets=confirmed)

            for tier_id, quantity in sorted(quantities.items()):
                await self.uow.tiers.increment_sold_quantity(tier_id=tier_id, quantity=quantity)

            if order.promo_code_id is not None:
                promo = await self.uow.promo_codes.get_by_id_for_update(
                    promo_code_id=order.promo_code_id
                )
                if promo is not None:
                    promo.ensure_uses_left()
                    await self.uow.promo_codes.increment_uses(promo_code_id=promo.id)

            event = await self.uow.events.get_by_id(event_id=order.event_id)
            await self.uow.commit()

        result = ConfirmPaymentResult(
            status=ConfirmPaymentStatus.CONFIRMED,
            order=completed_order,
            tickets=tuple(confirmed),
        )
        return result, event, {tier.id: tier.name for tier in tiers}

    async def _flag_second_capture(self, *, order_id: UUID, signal: PaymentSucceeded) -> None:
        """A different processor reference on a settled order means the buyer paid twice"""
        payment = await self.uow.payments.get_by_order_id(order_id=order_id)
        if payment is None or payment.external_reference in (None, signal.external_reference):
            return
        Logger.base.critical(
            f'🚨 [PAYMENT] Order {order_id} captured twice: {payment.external_reference} is '
            f'recorded, {signal.external_reference} ({signal.settled_amount} '
            f'{signal.settled_currency}) must be refunded manually'
        )
        metrics.record_payment_confirmation(result='duplicate_capture')

    async def _complete_payment(self, *, order: OrderEntity, signal: PaymentSucceeded) -> None:
        payment = await self.uow.payments.get_by_order_id(order_id=order.id)
        if payment is None:
            payment = await self.uow.payments.create(
                payment=PaymentEntity.create_pending(
                    order_id=order.id, amount=order.total_amount, currency=order.currency
                )
            )
        if signal.checkout_session_id and not payment.checkout_session_id:
            payment = payment.attach_checkout_session(signal.checkout_session_id)
        await self.uow.payments.update(
            payment=payment.complete(
                external_reference=signal.external_reference,
                settled_amount=signal.settled_amount,
                settled_currency=signal.settled_currency,
            )
        )

    async def _already_processed(self, *, order_id: UUID) -> ConfirmPaymentResult:
        order = await self.uow.orders.get_by_id(order_id=order_id)
        if order is None:
            raise OrderNotFoundError()
        tickets = await self.uow.tickets.list_by_order(order_id=order_id)
        return ConfirmPaymentResult(
            status=ConfirmPaymentStatus.ALREADY_PROCESSED,
            order=order,
            tickets=tuple(tickets),
        )
