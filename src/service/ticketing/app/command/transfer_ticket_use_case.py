from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from email_validator import EmailNotValidError, validate_email
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import CustomBaseError, DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.ticketing_result import TransferResult
from src.service.ticketing.app.interface.i_credential_issuer import ICredentialIssuer
from src.service.ticketing.app.interface.i_ticket_notifier import ITicketNotifier
from src.service.ticketing.domain.ticketing_errors import (
    EventNotFoundError,
    NotOwnerError,
    TicketNotFoundError,
)


class TransferTicketUseCase:
    """
    Hand a confirmed ticket to another attendee.

    The ticket row is locked while the attendee and credential are replaced,
    so a scan of the old credential either lands before the transfer or
    fails the credential comparison after it. Order and payment are untouched.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        credential_issuer: ICredentialIssuer,
        ticket_notifier: ITicketNotifier,
    ) -> None:
        self.uow = uow
        self.credential_issuer = credential_issuer
        self.ticket_notifier = ticket_notifier
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        credential_issuer: ICredentialIssuer = Depends(Provide[Container.credential_issuer]),
        ticket_notifier: ITicketNotifier = Depends(Provide[Container.ticket_notifier]),
    ) -> Self:
        return cls(uow=uow, credential_issuer=credential_issuer, ticket_notifier=ticket_notifier)

    @Logger.io
    async def transfer(
        self,
        *,
        ticket_id: UUID,
        requester_id: int,
        requester_name: str,
        attendee_name: str,
        attendee_email: str,
        attendee_phone: Optional[str] = None,
    ) -> TransferResult:
        with self.tracer.start_as_current_span(
            'use_case.transfer_ticket',
            attributes={'ticket.id': str(ticket_id), 'requester.id': requester_id},
        ):
            try:
                name, email = self._validate_recipient(attendee_name, attendee_email)

                async with self.uow:
                    ticket = await self.uow.tickets.get_by_id_for_update(ticket_id=ticket_id)
                    if ticket is None:
                        raise TicketNotFoundError()

                    order = await self.uow.orders.get_by_id(order_id=ticket.order_id)
                    if order is None or order.buyer_id != requester_id:
                        raise NotOwnerError()

                    event = await self.uow.events.get_by_id(event_id=ticket.event_id)
                    if event is None:
                        raise EventNotFoundError()

                    ticket.ensure_transferable(event_start_at=event.start_at)
                    transferred = ticket.transfer_to(
                        attendee_name=name,
                        attendee_email=email,
                        attendee_phone=attendee_phone,
                        credential=self.credential_issuer.issue(ticket=ticket),
                    )
                    await self.uow.tickets.update(ticket=transferred)
                    await self.uow.commit()
            except CustomBaseError:
                metrics.record_transfer(result='rejected')
                raise

            metrics.record_transfer(result='transferred')
            Logger.base.info(f'🔀 [TRANSFER] Ticket {ticket_id} transferred to {email}')

            notification_sent = await self.ticket_notifier.send_transfer_notice(
                ticket=transferred, event=event, from_name=requester_name
            )
            return TransferResult(ticket=transferred, notification_sent=notification_sent)

    @staticmethod
    def _validate_recipient(name: str, email: str) -> tuple[str, str]:
        if not name or not name.strip():
            raise DomainError('Recipient name is required')
        try:
            normalized = validate_email(email, check_deliverability=False).normalized
        except EmailNotValidError as e:
            raise DomainError(f'Invalid recipient email: {e}') from e
        return name.strip(), normalized
