"""
Unit test fixtures

InMemoryUnitOfWork mirrors what the SQLAlchemy unit of work guarantees:
- writes are staged and only become visible to other units of work on commit
- leaving the block without commit discards them
- *_for_update reads take a per-row asyncio.Lock held until commit/rollback,
  then read the latest committed row (like populate_existing)
- every repository call yields to the event loop, so asyncio.gather
  interleaves concurrent use cases the way concurrent requests would
"""

import asyncio
from collections import Counter
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
import itertools
from typing import Any, List, Optional, Sequence
from unittest.mock import AsyncMock
from uuid import UUID

import attrs
import pytest

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.ticketing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.ticketing.app.command.create_checkout_use_case import CreateCheckoutUseCase
from src.service.ticketing.app.dto.payment_dto import PaymentSucceeded
from src.service.ticketing.app.dto.ticketing_result import ConfirmPaymentResult
from src.service.ticketing.app.interface.i_event_repo import IEventRepo
from src.service.ticketing.app.interface.i_order_repo import IOrderRepo
from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.ticketing.app.interface.i_payout_repo import IPayoutRepo
from src.service.ticketing.app.interface.i_promo_code_repo import IPromoCodeRepo
from src.service.ticketing.app.interface.i_refund_repo import IRefundRepo
from src.service.ticketing.app.interface.i_ticket_notifier import ITicketNotifier
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.ticketing.app.interface.i_ticket_tier_repo import ITicketTierRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.payment_entity import PaymentEntity
from src.service.ticketing.domain.entity.payout_entity import PayoutEntity
from src.service.ticketing.domain.entity.promo_code_entity import DiscountType, PromoCodeEntity
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.entity.ticket_tier_entity import TicketTierEntity
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.enum.payout_status import PayoutStatus
from src.service.ticketing.domain.enum.order_status import OrderStatus, RefundStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.price_quote import TicketRequest
from src.service.ticketing.domain.value_object.tier_capacity import TierCapacity
from src.service.ticketing.driven_adapter.payment.mock_payment_gateway import MockPaymentGateway
from src.service.ticketing.driven_adapter.security.hmac_credential_issuer import (
    HmacCredentialIssuer,
)


ORGANIZER_ID = 1
BUYER_ID = 2
BUYER_EMAIL = 'buyer@example.com'
BUYER_NAME = 'Test Buyer'

TABLES = (
    'events',
    'tiers',
    'promo_codes',
    'orders',
    'payments',
    'tickets',
    'refunds',
    'payouts',
)


# =============================================================================
# In-memory persistence
# =============================================================================
class InMemoryStore:
    """Committed rows shared by every unit of work of one test"""

    def __init__(self) -> None:
        self.tables: dict[str, dict[Any, Any]] = {name: {} for name in TABLES}
        self._locks: dict[tuple[str, Any], asyncio.Lock] = {}
        self._sequences = {name: itertools.count(1) for name in TABLES}

    def next_id(self, table: str) -> int:
        return next(self._sequences[table])

    def lock_for(self, table: str, key: Any) -> asyncio.Lock:
        return self._locks.setdefault((table, key), asyncio.Lock())

    def insert(self, table: str, row: Any) -> Any:
        if getattr(row, 'id', None) is None:
            row = attrs.evolve(row, id=self.next_id(table))
        self.tables[table][row.id] = row
        return attrs.evolve(row)

    def get(self, table: str, key: Any) -> Any:
        row = self.tables[table].get(key)
        return attrs.evolve(row) if row is not None else None

    def all(self, table: str) -> list[Any]:
        return [attrs.evolve(row) for row in self.tables[table].values()]


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.commit_count = 0
        self._staged: dict[str, dict[Any, Any]] = {name: {} for name in TABLES}
        self._held: list[asyncio.Lock] = []

        self.events = _EventRepo(self)
        self.tiers = _TierRepo(self)
        self.promo_codes = _PromoCodeRepo(self)
        self.orders = _OrderRepo(self)
        self.payments = _PaymentRepo(self)
        self.tickets = _TicketRepo(self)
        self.refunds = _RefundRepo(self)
        self.payouts = _PayoutRepo(self)

    async def __aenter__(self) -> 'InMemoryUnitOfWork':
        self._staged = {name: {} for name in TABLES}
        await super().__aenter__()
        return self

    async def _commit(self) -> None:
        for table, rows in self._staged.items():
            self.store.tables[table].update(rows)
        self._staged = {name: {} for name in TABLES}
        self.commit_count += 1
        self._release()

    async def rollback(self) -> None:
        self._staged = {name: {} for name in TABLES}
        self._release()

    def _release(self) -> None:
        for lock in self._held:
            lock.release()
        self._held = []

    # --- helpers for the repositories -------------------------------------
    async def io(self) -> None:
        await asyncio.sleep(0)

    async def lock(self, table: str, key: Any) -> None:
        lock = self.store.lock_for(table, key)
        if any(held is lock for held in self._held):
            return
        await lock.acquire()
        self._held.append(lock)

    def read(self, table: str, key: Any) -> Any:
        if key in self._staged[table]:
            return attrs.evolve(self._staged[table][key])
        return self.store.get(table, key)

    def rows(self, table: str) -> list[Any]:
        merged = {**self.store.tables[table], **self._staged[table]}
        return [attrs.evolve(row) for row in merged.values()]

    def write(self, table: str, row: Any) -> Any:
        if getattr(row, 'id', None) is None:
            row = attrs.evolve(row, id=self.store.next_id(table))
        self._staged[table][row.id] = attrs.evolve(row)
        return attrs.evolve(row)


class _Repo:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self.uow = uow


class _EventRepo(_Repo, IEventRepo):
    async def create(self, *, event: EventEntity) -> EventEntity:
        await self.uow.io()
        return self.uow.write('events', event)

    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        await self.uow.io()
        return self.uow.read('events', event_id)

    async def list_by_organizer(self, *, organizer_id: int) -> List[EventEntity]:
        await self.uow.io()
        return [e for e in self.uow.rows('events') if e.organizer_id == organizer_id]

    async def search_published(
        self,
        *,
        search: str = '',
        city: str = '',
        category: str = '',
        limit: int,
        offset: int,
    ) -> tuple[List[EventEntity], int]:
        await self.uow.io()
        matches = sorted(
            (
                e
                for e in self.uow.rows('events')
                if e.status == EventStatus.PUBLISHED
                and (
                    not search
                    or search.lower() in e.title.lower()
                    or search.lower() in e.description.lower()
                )
                and (not city or city.lower() in e.city.lower())
                and (not category or e.category == category)
            ),
            key=lambda e: (e.start_at, e.id),
        )
        return matches[offset : offset + limit], len(matches)


class _TierRepo(_Repo, ITicketTierRepo):
    async def create_many(self, *, tiers: Sequence[TicketTierEntity]) -> List[TicketTierEntity]:
        await self.uow.io()
        return [self.uow.write('tiers', tier) for tier in tiers]

    async def list_by_event(self, *, event_id: int) -> List[TicketTierEntity]:
        await self.uow.io()
        return sorted(
            (t for t in self.uow.rows('tiers') if t.event_id == event_id), key=lambda t: t.id
        )

    async def list_by_events(self, *, event_ids: Sequence[int]) -> List[TicketTierEntity]:
        await self.uow.io()
        return sorted(
            (t for t in self.uow.rows('tiers') if t.event_id in set(event_ids)),
            key=lambda t: (t.event_id, t.id),
        )

    async def list_by_ids_for_update(self, *, tier_ids: Sequence[int]) -> List[TicketTierEntity]:
        await self.uow.io()
        tiers = []
        for tier_id in sorted(set(tier_ids)):
            await self.uow.lock('tiers', tier_id)
            await self.uow.io()
            tier = self.uow.read('tiers', tier_id)
            if tier is not None:
                tiers.append(tier)
        return tiers

    async def increment_sold_quantity(self, *, tier_id: int, quantity: int) -> int:
        await self.uow.io()
        tier = self.uow.read('tiers', tier_id)
        self.uow.write('tiers', attrs.evolve(tier, sold_quantity=tier.sold_quantity + quantity))
        return tier.sold_quantity + quantity


class _PromoCodeRepo(_Repo, IPromoCodeRepo):
    async def create(self, *, promo_code: PromoCodeEntity) -> PromoCodeEntity:
        await self.uow.io()
        return self.uow.write('promo_codes', promo_code)

    async def get_by_code(self, *, event_id: int, code: str) -> Optional[PromoCodeEntity]:
        await self.uow.io()
        for promo in self.uow.rows('promo_codes'):
            if promo.event_id == event_id and promo.code == code:
                return promo
        return None

    async def list_by_event(self, *, event_id: int) -> List[PromoCodeEntity]:
        await self.uow.io()
        return sorted(
            (p for p in self.uow.rows('promo_codes') if p.event_id == event_id),
            key=lambda p: p.id,
        )

    async def get_by_id_for_update(self, *, promo_code_id: int) -> Optional[PromoCodeEntity]:
        await self.uow.lock('promo_codes', promo_code_id)
        await self.uow.io()
        return self.uow.read('promo_codes', promo_code_id)

    async def increment_uses(self, *, promo_code_id: int) -> int:
        await self.uow.io()
        promo = self.uow.read('promo_codes', promo_code_id)
        self.uow.write(
            'promo_codes', attrs.evolve(promo, current_uses=promo.current_uses + 1)
        )
        return promo.current_uses + 1


class _OrderRepo(_Repo, IOrderRepo):
    async def create(self, *, order: OrderEntity) -> OrderEntity:
        await self.uow.io()
        return self.uow.write('orders', order)

    async def get_by_id(self, *, order_id: UUID) -> Optional[OrderEntity]:
        await self.uow.io()
        return self.uow.read('orders', order_id)

    async def get_by_id_for_update(self, *, order_id: UUID) -> Optional[OrderEntity]:
        await self.uow.lock('orders', order_id)
        await self.uow.io()
        return self.uow.read('orders', order_id)

    async def update(self, *, order: OrderEntity) -> OrderEntity:
        await self.uow.io()
        return self.uow.write('orders', order)

    async def list_by_buyer(self, *, buyer_id: int) -> List[OrderEntity]:
        await self.uow.io()
        return [o for o in self.uow.rows('orders') if o.buyer_id == buyer_id]

    async def list_by_event(self, *, event_id: int) -> List[OrderEntity]:
        await self.uow.io()
        # uuid7 ids sort by creation time
        return sorted(
            (o for o in self.uow.rows('orders') if o.event_id == event_id),
            key=lambda o: o.id,
            reverse=True,
        )

    async def sum_sales_by_events(self, *, event_ids: Sequence[int]) -> int:
        await self.uow.io()
        return sum(
            o.total_amount
            for o in self.uow.rows('orders')
            if o.event_id in set(event_ids)
            and o.status in (OrderStatus.COMPLETED, OrderStatus.REFUNDED)
        )


class _PaymentRepo(_Repo, IPaymentRepo):
    async def create(self, *, payment: PaymentEntity) -> PaymentEntity:
        await self.uow.io()
        return self.uow.write('payments', payment)

    async def get_by_order_id(self, *, order_id: UUID) -> Optional[PaymentEntity]:
        await self.uow.io()
        return next((p for p in self.uow.rows('payments') if p.order_id == order_id), None)

    async def get_by_external_reference(
        self, *, external_reference: str
    ) -> Optional[PaymentEntity]:
        await self.uow.io()
        return next(
            (
                p
                for p in self.uow.rows('payments')
                if p.external_reference == external_reference
            ),
            None,
        )

    async def update(self, *, payment: PaymentEntity) -> PaymentEntity:
        await self.uow.io()
        return self.uow.write('payments', payment)


class _TicketRepo(_Repo, ITicketRepo):
    async def create_many(self, *, tickets: Sequence[TicketEntity]) -> List[TicketEntity]:
        await self.uow.io()
        return [self.uow.write('tickets', ticket) for ticket in tickets]

    async def get_by_id(self, *, ticket_id: UUID) -> Optional[TicketEntity]:
        await self.uow.io()
        return self.uow.read('tickets', ticket_id)

    async def get_by_id_for_update(self, *, ticket_id: UUID) -> Optional[TicketEntity]:
        await self.uow.lock('tickets', ticket_id)
        await self.uow.io()
        return self.uow.read('tickets', ticket_id)

    async def list_by_order(self, *, order_id: UUID) -> List[TicketEntity]:
        await self.uow.io()
        return sorted(
            (t for t in self.uow.rows('tickets') if t.order_id == order_id), key=lambda t: t.id
        )

    async def list_by_order_for_update(self, *, order_id: UUID) -> List[TicketEntity]:
        ids = [ticket.id for ticket in await self.list_by_order(order_id=order_id)]
        for ticket_id in ids:
            await self.uow.lock('tickets', ticket_id)
        await self.uow.io()
        return [self.uow.read('tickets', ticket_id) for ticket_id in ids]

    async def list_by_holder(self, *, holder_id: int) -> List[TicketEntity]:
        await self.uow.io()
        return [t for t in self.uow.rows('tickets') if t.holder_id == holder_id]

    async def update(self, *, ticket: TicketEntity) -> TicketEntity:
        await self.uow.io()
        return self.uow.write('tickets', ticket)

    async def update_many(self, *, tickets: Sequence[TicketEntity]) -> None:
        await self.uow.io()
        for ticket in tickets:
            self.uow.write('tickets', ticket)

    async def count_by_orders(self, *, order_ids: Sequence[UUID]) -> dict[UUID, int]:
        await self.uow.io()
        wanted = set(order_ids)
        return dict(Counter(t.order_id for t in self.uow.rows('tickets') if t.order_id in wanted))

    async def check_in_if_not_scanned(
        self, *, ticket_id: UUID, credential: str, checked_in_at: datetime
    ) -> Optional[datetime]:
        # UPDATE ... WHERE waits for the row lock, then re-checks the predicate
        await self.uow.lock('tickets', ticket_id)
        await self.uow.io()
        ticket = self.uow.read('tickets', ticket_id)
        if (
            ticket is None
            or ticket.credential != credential
            or ticket.status != TicketStatus.CONFIRMED
            or ticket.checked_in_at is not None
        ):
            return None
        self.uow.write('tickets', ticket.mark_checked_in(checked_in_at))
        return checked_in_at


class _RefundRepo(_Repo, IRefundRepo):
    async def create(self, *, refund: RefundEntity) -> RefundEntity:
        await self.uow.io()
        return self.uow.write('refunds', refund)

    async def update(self, *, refund: RefundEntity) -> RefundEntity:
        await self.uow.io()
        return self.uow.write('refunds', refund)

    async def _sum(self, *, order_id: UUID, statuses: tuple[RefundStatus, ...]) -> int:
        await self.uow.io()
        return sum(
            r.amount
            for r in self.uow.rows('refunds')
            if r.order_id == order_id and r.status in statuses
        )

    async def sum_completed_by_order(self, *, order_id: UUID) -> int:
        return await self._sum(order_id=order_id, statuses=(RefundStatus.COMPLETED,))

    async def sum_reserved_by_order(self, *, order_id: UUID) -> int:
        return await self._sum(
            order_id=order_id,
            statuses=(RefundStatus.PENDING, RefundStatus.PROCESSING, RefundStatus.COMPLETED),
        )

    async def sum_completed_by_events(self, *, event_ids: Sequence[int]) -> int:
        await self.uow.io()
        order_ids = {o.id for o in self.uow.rows('orders') if o.event_id in set(event_ids)}
        return sum(
            r.amount
            for r in self.uow.rows('refunds')
            if r.order_id in order_ids and r.status == RefundStatus.COMPLETED
        )


class _PayoutRepo(_Repo, IPayoutRepo):
    async def list_by_organizer(self, *, organizer_id: int) -> List[PayoutEntity]:
        await self.uow.io()
        return sorted(
            (p for p in self.uow.rows('payouts') if p.organizer_id == organizer_id),
            key=lambda p: p.id,
            reverse=True,
        )


# =============================================================================
# Seed data
# =============================================================================
class Seeder:
    """Writes committed rows straight into the store"""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    def event(
        self,
        *,
        organizer_id: int = ORGANIZER_ID,
        title: str = 'Jazz Night',
        description: str = '',
        city: str = '',
        category: str = '',
        start_at: Optional[datetime] = None,
        status: EventStatus = EventStatus.PUBLISHED,
    ) -> EventEntity:
        start_at = start_at or datetime.now(timezone.utc) + timedelta(days=30)
        return self.store.insert(
            'events',
            EventEntity(
                title=title,
                organizer_id=organizer_id,
                venue='Blue Note',
                description=description,
                city=city,
                category=category,
                start_at=start_at,
                end_at=start_at + timedelta(hours=3),
                status=status,
            ),
        )

    def tier(
        self,
        *,
        event_id: int,
        name: str = 'General Admission',
        base_price: int = 1000,
        capacity: Optional[TierCapacity] = None,
        sold_quantity: int = 0,
        sale_start_at: Optional[datetime] = None,
        sale_end_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> TicketTierEntity:
        return self.store.insert(
            'tiers',
            TicketTierEntity(
                event_id=event_id,
                name=name,
                base_price=base_price,
                capacity=capacity or TierCapacity.limited(100),
                sold_quantity=sold_quantity,
                sale_start_at=sale_start_at,
                sale_end_at=sale_end_at,
                is_active=is_active,
            ),
        )

    def promo(
        self,
        *,
        event_id: int,
        code: str = 'SAVE15',
        discount_type: DiscountType = DiscountType.PERCENTAGE,
        discount_value: int = 15,
        max_uses: Optional[int] = None,
        current_uses: int = 0,
        valid_from: Optional[datetime] = None,
        valid_to: Optional[datetime] = None,
    ) -> PromoCodeEntity:
        now = datetime.now(timezone.utc)
        return self.store.insert(
            'promo_codes',
            PromoCodeEntity(
                event_id=event_id,
                code=code,
                discount_type=discount_type,
                discount_value=discount_value,
                max_uses=max_uses,
                current_uses=current_uses,
                valid_from=valid_from or now - timedelta(days=1),
                valid_to=valid_to or now + timedelta(days=1),
            ),
        )

    def payout(
        self,
        *,
        amount: int,
        status: PayoutStatus,
        organizer_id: int = ORGANIZER_ID,
    ) -> PayoutEntity:
        return self.store.insert(
            'payouts',
            PayoutEntity(organizer_id=organizer_id, amount=amount, currency='usd', status=status),
        )


# =============================================================================
# Fixtures
# =============================================================================
@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> Callable[[], InMemoryUnitOfWork]:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def uow(uow_factory: Callable[[], InMemoryUnitOfWork]) -> InMemoryUnitOfWork:
    return uow_factory()


@pytest.fixture
def seed(store: InMemoryStore) -> Seeder:
    return Seeder(store)


@pytest.fixture
def credential_issuer() -> HmacCredentialIssuer:
    return HmacCredentialIssuer(secret='unit-test-credential-secret')


@pytest.fixture
def payment_gateway() -> MockPaymentGateway:
    return MockPaymentGateway(webhook_secret='unit-test-webhook-secret')


@pytest.fixture
def ticket_notifier() -> AsyncMock:
    notifier = AsyncMock(spec=ITicketNotifier)
    notifier.send_order_confirmation.return_value = True
    notifier.send_transfer_notice.return_value = True
    notifier.send_refund_notice.return_value = True
    return notifier


@pytest.fixture
def make_checkout_use_case(
    uow_factory: Callable[[], InMemoryUnitOfWork], payment_gateway: MockPaymentGateway
) -> Callable[[], CreateCheckoutUseCase]:
    return lambda: CreateCheckoutUseCase(uow=uow_factory(), payment_gateway=payment_gateway)


@pytest.fixture
def make_confirm_use_case(
    uow_factory: Callable[[], InMemoryUnitOfWork],
    credential_issuer: HmacCredentialIssuer,
    ticket_notifier: AsyncMock,
    payment_gateway: MockPaymentGateway,
) -> Callable[[], ConfirmPaymentUseCase]:
    return lambda: ConfirmPaymentUseCase(
        uow=uow_factory(),
        credential_issuer=credential_issuer,
        ticket_notifier=ticket_notifier,
        payment_gateway=payment_gateway,
    )


@pytest.fixture
def pay(
    payment_gateway: MockPaymentGateway,
) -> Callable[[str], PaymentSucceeded]:
    """Buyer completes the hosted checkout; returns the verified webhook signal"""

    def _pay(session_id: str) -> PaymentSucceeded:
        payload, signature = payment_gateway.complete_session(session_id)
        signal = payment_gateway.parse_webhook(payload=payload, signature=signature)
        assert isinstance(signal, PaymentSucceeded)
        return signal

    return _pay


@pytest.fixture
def purchase(
    make_checkout_use_case: Callable[[], CreateCheckoutUseCase],
    make_confirm_use_case: Callable[[], ConfirmPaymentUseCase],
    pay: Callable[[str], PaymentSucceeded],
) -> Callable[..., Awaitable[ConfirmPaymentResult]]:
    """Checkout, pay and confirm in one step"""

    async def _purchase(
        *,
        event_id: int,
        items: Sequence[tuple[int, int]],
        buyer_id: int = BUYER_ID,
        buyer_email: str = BUYER_EMAIL,
        promo_code: Optional[str] = None,
    ) -> ConfirmPaymentResult:
        checkout = await make_checkout_use_case().create_checkout(
            buyer_id=buyer_id,
            buyer_email=buyer_email,
            buyer_name=BUYER_NAME,
            event_id=event_id,
            items=[TicketRequest(tier_id=tier_id, quantity=qty) for tier_id, qty in items],
            promo_code=promo_code,
        )
        return await make_confirm_use_case().confirm_payment(signal=pay(checkout.session_id))

    return _purchase
