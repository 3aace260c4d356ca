"""
Unit tests for EmailTicketNotifier

Notifications run after commit; a failing provider must turn into a False
return, never an exception.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import httpx
import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import ExternalServiceError
from src.service.ticketing.app.interface.i_email_sender import IEmailSender
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.order_status import OrderStatus
from src.service.ticketing.driven_adapter.credential.qr_url_renderer import QrUrlRenderer
from src.service.ticketing.driven_adapter.notification.email_ticket_notifier import (
    EmailTicketNotifier,
    format_money,
)
from src.service.ticketing.driven_adapter.notification.mock_email_sender import MockEmailSender
from src.service.ticketing.driven_adapter.notification.resend_email_sender import (
    ResendEmailSender,
)


START = datetime(2030, 6, 1, 20, 0, tzinfo=timezone.utc)


@pytest.fixture
def event() -> EventEntity:
    return EventEntity(
        id=1,
        title='Jazz <Night>',
        organizer_id=1,
        venue='Blue Note',
        start_at=START,
        end_at=START.replace(hour=23),
        address='131 W 3rd St',
    )


@pytest.fixture
def order() -> OrderEntity:
    return OrderEntity(
        id=uuid7(),
        buyer_id=2,
        event_id=1,
        subtotal_amount=10000,
        discount_amount=0,
        total_amount=10000,
        currency='usd',
        buyer_email='buyer@example.com',
        status=OrderStatus.COMPLETED,
    )


@pytest.fixture
def ticket(order) -> TicketEntity:
    ticket = TicketEntity.create_pending(
        order_id=order.id,
        event_id=1,
        tier_id=5,
        holder_id=2,
        price=5000,
        attendee_name='Friend',
        attendee_email='friend@example.com',
    )
    return ticket.confirm(price=5000, credential='tkt1.payload.sig')


def _notifier(sender: IEmailSender) -> EmailTicketNotifier:
    return EmailTicketNotifier(
        email_sender=sender, credential_renderer=QrUrlRenderer(base_url='https://qr.test/?d=')
    )


@pytest.mark.unit
class TestEmailTicketNotifier:
    async def test_order_confirmation_lists_every_ticket(self, event, order, ticket):
        # Arrange
        sender = MockEmailSender(debug=False)

        # Act
        sent = await _notifier(sender).send_order_confirmation(
            to='buyer@example.com',
            order=order,
            event=event,
            tickets=[ticket, ticket],
            tier_names={5: 'GA'},
        )

        # Assert
        assert sent is True
        (email,) = sender.sent_emails
        assert email['to'] == 'buyer@example.com'
        assert email['subject'] == 'Your Tickets for Jazz <Night>'
        assert 'Your Tickets (2):' in email['text']
        assert 'https://qr.test/?d=tkt1.payload.sig' in email['text']
        assert '100.00 USD' in email['text']
        assert 'Jazz &lt;Night&gt;' in email['html']

    async def test_transfer_notice_goes_to_new_attendee(self, event, ticket):
        sender = MockEmailSender(debug=False)

        sent = await _notifier(sender).send_transfer_notice(
            ticket=ticket, event=event, from_name='Test Buyer'
        )

        assert sent is True
        (email,) = sender.sent_emails
        assert email['to'] == 'friend@example.com'
        assert email['subject'].startswith('Test Buyer sent you a ticket')

    async def test_refund_notice_mentions_amount_and_reason(self, event, order):
        sender = MockEmailSender(debug=False)
        refund = RefundEntity.reserve(
            order_id=order.id,
            amount=2500,
            reason='Show rescheduled',
            processed_by=1,
        ).complete(external_reference='re_1')

        await _notifier(sender).send_refund_notice(
            to='buyer@example.com', order=order, refund=refund, event=event
        )

        (email,) = sender.sent_emails
        assert '25.00 USD' in email['text']
        assert 'Show rescheduled' in email['text']

    async def test_provider_exception_becomes_false(self, event, ticket):
        sender = AsyncMock(spec=IEmailSender)
        sender.send_email.side_effect = ExternalServiceError('provider down')

        sent = await _notifier(sender).send_transfer_notice(
            ticket=ticket, event=event, from_name='Test Buyer'
        )

        assert sent is False

    async def test_provider_rejection_becomes_false(self, event, ticket):
        sender = AsyncMock(spec=IEmailSender)
        sender.send_email.return_value = False

        sent = await _notifier(sender).send_transfer_notice(
            ticket=ticket, event=event, from_name='Test Buyer'
        )

        assert sent is False

    def test_format_money(self):
        assert format_money(935, 'usd') == '9.35 USD'
        assert format_money(0, 'eur') == '0.00 EUR'


@pytest.mark.unit
class TestResendEmailSender:
    @pytest.fixture
    def sender(self) -> ResendEmailSender:
        return ResendEmailSender(
            api_key='re_test', sender='tickets@example.com', api_url='https://resend.test/emails'
        )

    def _patch_transport(self, monkeypatch, handler) -> None:
        transport = httpx.MockTransport(handler)
        real_client = httpx.AsyncClient

        monkeypatch.setattr(
            httpx, 'AsyncClient', lambda **kwargs: real_client(transport=transport, **kwargs)
        )

    async def test_accepted_message(self, sender, monkeypatch):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen['auth'] = request.headers['authorization']
            seen['body'] = request.content
            return httpx.Response(200, json={'id': 'email_1'})

        self._patch_transport(monkeypatch, handler)

        sent = await sender.send_email(to='buyer@example.com', subject='Hi', text='Hello')

        assert sent is True
        assert seen['auth'] == 'Bearer re_test'
        assert b'"tickets@example.com"' in seen['body']

    async def test_rejected_message(self, sender, monkeypatch):
        self._patch_transport(monkeypatch, lambda request: httpx.Response(422, text='bad'))

        assert await sender.send_email(to='x@example.com', subject='Hi', text='Hello') is False

    async def test_unreachable_provider(self, sender, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('refused', request=request)

        self._patch_transport(monkeypatch, handler)

        with pytest.raises(ExternalServiceError):
            await sender.send_email(to='x@example.com', subject='Hi', text='Hello')
