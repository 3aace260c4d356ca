"""
Unit tests for TransferTicketUseCase
"""

from datetime import datetime, timedelta, timezone

import attrs
import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.service.ticketing.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticketing.app.command.transfer_ticket_use_case import TransferTicketUseCase
from src.service.ticketing.domain.enum.order_status import OrderStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticketing_errors import (
    AlreadyCheckedInError,
    EventPassedError,
    InvalidCredentialError,
    NotOwnerError,
    NotTransferableError,
    TicketNotFoundError,
)


BUYER_ID = 2


@pytest.fixture
def make_transfer(uow_factory, credential_issuer, ticket_notifier):
    return lambda: TransferTicketUseCase(
        uow=uow_factory(), credential_issuer=credential_issuer, ticket_notifier=ticket_notifier
    )


@pytest.fixture
async def owned(seed, purchase):
    event = seed.event()
    tier = seed.tier(event_id=event.id)
    result = await purchase(event_id=event.id, items=[(tier.id, 1)])
    return event, result.order, result.tickets[0]


async def _transfer(use_case, ticket_id, *, requester_id=BUYER_ID, email='friend@example.com'):
    return await use_case.transfer(
        ticket_id=ticket_id,
        requester_id=requester_id,
        requester_name='Test Buyer',
        attendee_name='  Friend  ',
        attendee_email=email,
    )


@pytest.mark.unit
class TestTransferTicket:
    async def test_transfer_reissues_credential(
        self, store, make_transfer, owned, ticket_notifier, credential_issuer, uow_factory
    ):
        """
        Given: a confirmed ticket owned by the buyer
        When: the buyer transfers it to a friend
        Then: attendee and credential change, the old credential stops scanning,
        the new one admits, order untouched and the friend is notified
        """
        # Arrange
        event, order, ticket = owned

        # Act
        result = await _transfer(make_transfer(), ticket.id)

        # Assert
        stored = store.get('tickets', ticket.id)
        assert stored.attendee_name == 'Friend'
        assert stored.attendee_email == 'friend@example.com'
        assert stored.credential == result.ticket.credential != ticket.credential
        assert stored.status == TicketStatus.CONFIRMED
        assert store.get('orders', order.id).status == OrderStatus.COMPLETED
        assert result.notification_sent is True
        ticket_notifier.send_transfer_notice.assert_awaited_once()
        assert ticket_notifier.send_transfer_notice.await_args.kwargs['from_name'] == 'Test Buyer'

        check_in = CheckInTicketUseCase(uow=uow_factory(), credential_issuer=credential_issuer)
        with pytest.raises(InvalidCredentialError):
            await check_in.check_in(
                credential=ticket.credential, organizer_id=event.organizer_id, event_id=event.id
            )
        admitted = await CheckInTicketUseCase(
            uow=uow_factory(), credential_issuer=credential_issuer
        ).check_in(credential=stored.credential, organizer_id=event.organizer_id, event_id=event.id)
        assert admitted.valid is True

    async def test_only_the_buyer_may_transfer(self, store, make_transfer, owned):
        _, _, ticket = owned

        with pytest.raises(NotOwnerError):
            await _transfer(make_transfer(), ticket.id, requester_id=77)
        assert store.get('tickets', ticket.id).credential == ticket.credential

    async def test_unknown_ticket(self, make_transfer):
        with pytest.raises(TicketNotFoundError):
            await _transfer(make_transfer(), uuid7())

    async def test_checked_in_ticket(self, store, make_transfer, owned):
        _, _, ticket = owned
        store.tables['tickets'][ticket.id] = ticket.mark_checked_in(datetime.now(timezone.utc))

        with pytest.raises(AlreadyCheckedInError):
            await _transfer(make_transfer(), ticket.id)

    async def test_refunded_ticket(self, store, make_transfer, owned):
        _, _, ticket = owned
        store.tables['tickets'][ticket.id] = ticket.mark_refunded()

        with pytest.raises(NotTransferableError):
            await _transfer(make_transfer(), ticket.id)

    async def test_event_already_started(self, store, make_transfer, owned):
        event, _, ticket = owned
        started = datetime.now(timezone.utc) - timedelta(minutes=5)
        store.tables['events'][event.id] = attrs.evolve(
            event, start_at=started, end_at=started + timedelta(hours=3)
        )

        with pytest.raises(EventPassedError):
            await _transfer(make_transfer(), ticket.id)

    @pytest.mark.parametrize('email', ['', 'not-an-email', 'friend@'])
    async def test_invalid_recipient_email(self, make_transfer, owned, ticket_notifier, email):
        _, _, ticket = owned

        with pytest.raises(DomainError, match='Invalid recipient email'):
            await _transfer(make_transfer(), ticket.id, email=email)
        ticket_notifier.send_transfer_notice.assert_not_awaited()
