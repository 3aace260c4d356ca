from datetime import datetime, timezone
from typing import Optional, Self, Sequence
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import (
    CustomBaseError,
    DomainError,
    ExternalServiceError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.payment_dto import CheckoutMetadata
from src.service.ticketing.app.dto.ticketing_result import CheckoutResult
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.payment_entity import PaymentEntity
from src.service.ticketing.domain.entity.promo_code_entity import PromoCodeEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.inventory_guard import ensure_all_available
from src.service.ticketing.domain.pricing_calculator import (
    calculate_price,
    validate_ticket_requests,
)
from src.service.ticketing.domain.ticketing_errors import (
    EventNotFoundError,
    InvalidPromoCodeError,
    TierNotFoundError,
    TierNotOnSaleError,
)
from src.service.ticketing.domain.value_object.price_quote import PriceQuote, TicketRequest


class CreateCheckoutUseCase:
    """
    Create checkout intent

    Flow:
    1. Price the request and run the inventory guard (advisory, reserves nothing)
    2. Commit a pending Order, Payment and one pending Ticket per seat
    3. Ask the payment processor for a checkout session (no transaction open)
    4. Store the session id on the Payment

    Capacity and promo usage are only consumed later by ConfirmPaymentUseCase.
    A processor failure in step 3 cancels the pending order.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        payment_gateway: IPaymentGateway,
        currency: str = 'usd',
        max_per_tier: int = 50,
        max_per_order: int = 100,
    ) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.currency = currency
        self.max_per_tier = max_per_tier
        self.max_per_order = max_per_order
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(
            uow=uow,
            payment_gateway=payment_gateway,
            currency=settings.PAYMENT_CURRENCY,
            max_per_tier=settings.MAX_TICKETS_PER_TIER,
            max_per_order=settings.MAX_TICKETS_PER_ORDER,
        )

    @Logger.io
    async def create_checkout(
        self,
        *,
        buyer_id: int,
        buyer_email: str,
        buyer_name: str,
        event_id: int,
        items: Sequence[TicketRequest],
        promo_code: Optional[str] = None,
    ) -> CheckoutResult:
        with self.tracer.start_as_current_span(
            'use_case.create_checkout',
            attributes={
                'event.id': event_id,
                'buyer.id': buyer_id,
                'checkout.ticket_count': sum(item.quantity for item in items),
            },
        ):
            validate_ticket_requests(
                items, max_per_tier=self.max_per_tier, max_per_order=self.max_per_order
            )
            now = datetime.now(timezone.utc)

            try:
                async with self.uow:
                    event = await self.uow.events.get_by_id(event_id=event_id)
                    if event is None:
                        raise EventNotFoundError()
                    if not event.is_published():
                        raise DomainError('Event is not available for purchase')

                    tiers = await self.uow.tiers.list_by_event(event_id=event_id)
                    tiers_by_id = {tier.id: tier for tier in tiers}
                    for item in items:
                        tier = tiers_by_id.get(item.tier_id)
                        if tier is None:
                            raise TierNotFoundError(item.tier_id)
                        if not tier.is_on_sale(now=now):
                            raise TierNotOnSaleError(f'{tier.name} is not on sale')

                    promo = await self._load_promo_code(event_id=event_id, code=promo_code)
                    quote = calculate_price(requests=items, tiers=tiers, promo_code=promo, now=now)
                    ensure_all_available(
                        tiers=tiers, quantities={item.tier_id: item.quantity for item in items}
                    )

                    order = OrderEntity.create_pending(
                        buyer_id=buyer_id,
                        event_id=event_id,
                        buyer_email=buyer_email,
                        quote=quote,
                        currency=self.currency,
                    )
                    await self.uow.orders.create(order=order)
                    await self.uow.payments.create(
                        payment=PaymentEntity.create_pending(
                            order_id=order.id, amount=quote.total, currency=self.currency
                        )
                    )
                    await self.uow.tickets.create_many(
                        tickets=self._pending_tickets(
                            order=order, quote=quote, name=buyer_name, email=buyer_email
                        )
                    )
                    await self.uow.commit()
            except CustomBaseError:
                metrics.record_checkout(event_id=event_id, result='rejected')
                raise

            Logger.base.info(
                f'🛒 [CHECKOUT] Order {order.id} pending: {quote.ticket_count} tickets, '
                f'total {quote.total} {self.currency}'
            )

            try:
                session = await self.payment_gateway.create_checkout_session(
                    quote=quote,
                    currency=self.currency,
                    event_title=event.title,
                    customer_email=buyer_email or None,
                    metadata=CheckoutMetadata(
                        order_id=order.id,
                        event_id=event_id,
                        buyer_id=buyer_id,
                        promo_code_id=quote.promo_code_id,
                    ),
                )
            except ExternalServiceError:
                Logger.base.warning(
                    f'⚠️ [CHECKOUT] Processor unavailable, cancelling order {order.id}'
                )
                await self._cancel_pending_order(order_id=order.id)
                metrics.record_checkout(event_id=event_id, result='processor_error')
                raise

            async with self.uow:
                payment = await self.uow.payments.get_by_order_id(order_id=order.id)
                if payment is not None:
                    await self.uow.payments.update(
                        payment=payment.attach_checkout_session(session.session_id)
                    )
                await self.uow.commit()

            metrics.record_checkout(
                event_id=event_id, result='created', total=quote.total, currency=self.currency
            )
            Logger.base.info(f'💳 [CHECKOUT] Session {session.session_id} for order {order.id}')
            return CheckoutResult(
                order=order, quote=quote, session_id=session.session_id, checkout_url=session.url
            )

    async def _load_promo_code(
        self, *, event_id: int, code: Optional[str]
    ) -> Optional[PromoCodeEntity]:
        if code is None or not code.strip():
            return None
        promo = await self.uow.promo_codes.get_by_code(
            event_id=event_id, code=PromoCodeEntity.normalize_code(code)
        )
        if promo is None:
            raise InvalidPromoCodeError('Invalid promo code')
        return promo

    @staticmethod
    def _pending_tickets(
        *, order: OrderEntity, quote: PriceQuote, name: str, email: str
    ) -> list[TicketEntity]:
        return [
            TicketEntity.create_pending(
                order_id=order.id,
                event_id=order.event_id,
                tier_id=item.tier_id,
                holder_id=order.buyer_id,
                price=item.unit_price,
                attendee_name=name,
                attendee_email=email,
            )
            for item in quote.line_items
            for _ in range(item.quantity)
        ]

    async def _cancel_pending_order(self, *, order_id: UUID) -> None:
        async with self.uow:
            order = await self.uow.orders.get_by_id_for_update(order_id=order_id)
            if order is None or not order.is_pending:
                return
            await self.uow.orders.update(order=order.cancel())

            payment = await self.uow.payments.get_by_order_id(order_id=order_id)
            if payment is not None:
                await self.uow.payments.update(payment=payment.fail())

            tickets = await self.uow.tickets.list_by_order_for_update(order_id=order_id)
            await self.uow.tickets.update_many(
                tickets=[t.cancel() for t in tickets if t.status == TicketStatus.PENDING]
            )
            await self.uow.commit()
