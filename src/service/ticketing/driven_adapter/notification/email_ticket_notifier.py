"""
Email Ticket Notifier

Builds the receipt, transfer and refund messages (plain text plus HTML) and
hands them to the configured IEmailSender. Runs after commit, so nothing
here may fail the business operation: every error becomes a warning log and
a False return.
"""

from html import escape
from typing import Awaitable, Sequence

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.interface.i_credential_renderer import ICredentialRenderer
from src.service.ticketing.app.interface.i_email_sender import IEmailSender
from src.service.ticketing.app.interface.i_ticket_notifier import ITicketNotifier
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.order_entity import OrderEntity
from src.service.ticketing.domain.entity.refund_entity import RefundEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


def format_money(amount: int, currency: str) -> str:
    return f'{amount / 100:.2f} {currency.upper()}'


def format_event_date(event: EventEntity) -> str:
    return event.start_at.strftime('%A, %B %d, %Y at %H:%M') + f' ({event.timezone})'


class EmailTicketNotifier(ITicketNotifier):
    def __init__(self, *, email_sender: IEmailSender, credential_renderer: ICredentialRenderer):
        self.email_sender = email_sender
        self.credential_renderer = credential_renderer

    async def _deliver(self, *, kind: str, to: str, sending: Awaitable[bool]) -> bool:
        try:
            sent = await sending
        except Exception as e:  # noqa: BLE001
            Logger.base.warning(f'📧 [EMAIL] {kind} email to {to} failed: {e}')
            sent = False
        else:
            if not sent:
                Logger.base.warning(f'📧 [EMAIL] {kind} email to {to} was not accepted')
        metrics.record_email(kind=kind, sent=sent)
        return sent

    async def send_order_confirmation(
        self,
        *,
        to: str,
        order: OrderEntity,
        event: EventEntity,
        tickets: Sequence[TicketEntity],
        tier_names: dict[int, str],
    ) -> bool:
        subject = f'Your Tickets for {event.title}'
        text_lines = [
            'Thank you for your purchase!',
            '',
            f'Event: {event.title}',
            f'Date: {format_event_date(event)}',
            f'Venue: {event.venue}',
            f'Address: {event.address}',
            '',
            f'Your Tickets ({len(tickets)}):',
        ]
        ticket_blocks = []
        for index, ticket in enumerate(tickets, start=1):
            tier_name = tier_names.get(ticket.tier_id, 'Ticket')
            qr_url = self.credential_renderer.render(credential=ticket.credential or '')
            text_lines += [
                f'  {index}. {tier_name} - {format_money(ticket.price, order.currency)}',
                f'     Attendee: {ticket.attendee_name}',
                f'     Ticket ID: {ticket.id}',
                f'     QR code: {qr_url}',
            ]
            ticket_blocks.append(
                f'<div style="border:1px solid #e5e7eb;border-radius:8px;padding:16px;margin-bottom:12px">'
                f'<h3>Ticket {index}: {escape(tier_name)}</h3>'
                f'<p>Attendee: {escape(ticket.attendee_name)}</p>'
                f'<p>Price: {format_money(ticket.price, order.currency)}</p>'
                f'<p>Ticket ID: {ticket.id}</p>'
                f'<img src="{escape(qr_url)}" alt="Ticket QR Code" style="max-width:200px"/>'
                f'</div>'
            )
        text_lines += [
            '',
            f'Order ID: {order.id}',
            f'Total: {format_money(order.total_amount, order.currency)}',
            '',
            'Each QR code is unique and can only be scanned once.',
        ]
        html = (
            f'<h1>Your Tickets Are Ready!</h1>'
            f'<p>Thank you for your purchase! Your tickets for <strong>{escape(event.title)}</strong> are below.</p>'
            f'<p><strong>Date:</strong> {escape(format_event_date(event))}<br/>'
            f'<strong>Venue:</strong> {escape(event.venue)}<br/>'
            f'<strong>Address:</strong> {escape(event.address)}</p>'
            f'{"".join(ticket_blocks)}'
            f'<p>Order ID: {order.id}<br/><strong>Total: '
            f'{format_money(order.total_amount, order.currency)}</strong></p>'
        )
        return await self._deliver(
            kind='Order confirmation',
            to=to,
            sending=self.email_sender.send_email(
                to=to, subject=subject, text='\n'.join(text_lines), html=html
            ),
        )

    async def send_transfer_notice(
        self, *, ticket: TicketEntity, event: EventEntity, from_name: str
    ) -> bool:
        qr_url = self.credential_renderer.render(credential=ticket.credential or '')
        subject = f'{from_name} sent you a ticket for {event.title}'
        text = '\n'.join(
            [
                f'Hi {ticket.attendee_name},',
                '',
                f'{from_name} has transferred a ticket to you.',
                '',
                f'Event: {event.title}',
                f'Date: {format_event_date(event)}',
                f'Venue: {event.venue}',
                f'Ticket ID: {ticket.id}',
                f'QR code: {qr_url}',
                '',
                'Any earlier QR code for this ticket is no longer valid.',
            ]
        )
        html = (
            f'<p>Hi {escape(ticket.attendee_name)},</p>'
            f'<p>{escape(from_name)} has transferred a ticket for '
            f'<strong>{escape(event.title)}</strong> to you.</p>'
            f'<p>{escape(format_event_date(event))} at {escape(event.venue)}</p>'
            f'<img src="{escape(qr_url)}" alt="Ticket QR Code" style="max-width:200px"/>'
        )
        return await self._deliver(
            kind='Transfer',
            to=ticket.attendee_email,
            sending=self.email_sender.send_email(
                to=ticket.attendee_email, subject=subject, text=text, html=html
            ),
        )

    async def send_refund_notice(
        self, *, to: str, order: OrderEntity, refund: RefundEntity, event: EventEntity
    ) -> bool:
        amount = format_money(refund.amount, order.currency)
        subject = f'Refund processed for {event.title}'
        text = '\n'.join(
            [
                f'A refund of {amount} has been issued for your order {order.id}.',
                f'Reason: {refund.reason}',
                '',
                'Refunded tickets can no longer be used for entry.',
                'Depending on your bank it may take 5-10 business days to appear.',
            ]
        )
        html = (
            f'<p>A refund of <strong>{amount}</strong> has been issued for your order '
            f'{order.id} ({escape(event.title)}).</p>'
            f'<p>Reason: {escape(refund.reason)}</p>'
        )
        return await self._deliver(
            kind='Refund',
            to=to,
            sending=self.email_sender.send_email(to=to, subject=subject, text=text, html=html),
        )
