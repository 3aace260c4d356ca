from datetime import datetime, timezone
from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.ticketing_result import CheckInResult
from src.service.ticketing.app.interface.i_credential_issuer import ICredentialIssuer
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.ticketing_errors import (
    AlreadyScannedError,
    EventNotFoundError,
    InvalidCredentialError,
    TicketNotFoundError,
    WrongEventError,
)


class CheckInTicketUseCase:
    """
    Check-in Validator

    A ticket moves confirmed -> checked_in exactly once. The final step is a
    compare-and-set UPDATE, so of two scans racing on the same ticket one
    wins and the other is reported as already scanned with the winner's
    timestamp.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, credential_issuer: ICredentialIssuer) -> None:
        self.uow = uow
        self.credential_issuer = credential_issuer
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(get_unit_of_work),
        credential_issuer: ICredentialIssuer = Depends(Provide[Container.credential_issuer]),
    ) -> Self:
        return cls(uow=uow, credential_issuer=credential_issuer)

    @Logger.io
    async def check_in(self, *, credential: str, organizer_id: int, event_id: int) -> CheckInResult:
        with self.tracer.start_as_current_span(
            'use_case.check_in',
            attributes={'event.id': event_id, 'organizer.id': organizer_id},
        ):
            try:
                result = await self._check_in(
                    credential=credential, organizer_id=organizer_id, event_id=event_id
                )
            except CustomBaseError:
                metrics.record_check_in(event_id=event_id, result='rejected')
                raise

            metrics.record_check_in(
                event_id=event_id, result='valid' if result.valid else 'already_scanned'
            )
            return result

    async def _check_in(self, *, credential: str, organizer_id: int, event_id: int) -> CheckInResult:
        claims = self.credential_issuer.decode(credential=credential)

        async with self.uow:
            event = await self.uow.events.get_by_id(event_id=event_id)
            if event is None:
                raise EventNotFoundError()
            event.ensure_owned_by(organizer_id)

            ticket = await self.uow.tickets.get_by_id(ticket_id=claims.ticket_id)
            if ticket is None:
                raise TicketNotFoundError()
            if ticket.event_id != event_id or claims.event_id != event_id:
                raise WrongEventError()
            # A transfer re-issues the credential; older ones stop working here
            if ticket.credential != credential:
                raise InvalidCredentialError()

            try:
                ticket.ensure_scannable()
            except AlreadyScannedError as e:
                return self._already_scanned(ticket, e.checked_in_at)

            now = datetime.now(timezone.utc)
            checked_in_at = await self.uow.tickets.check_in_if_not_scanned(
                ticket_id=ticket.id, credential=credential, checked_in_at=now
            )
            if checked_in_at is None:
                return await self._resolve_lost_race(ticket_id=ticket.id, credential=credential)
            await self.uow.commit()

        Logger.base.info(f'🎟️ [CHECK-IN] Ticket {ticket.id} admitted to event {event_id}')
        return CheckInResult(
            valid=True,
            already_scanned=False,
            ticket=ticket.mark_checked_in(checked_in_at),
            checked_in_at=checked_in_at,
        )

    async def _resolve_lost_race(self, *, ticket_id: UUID, credential: str) -> CheckInResult:
        # Another writer changed the row between our read and the update
        current = await self.uow.tickets.get_by_id(ticket_id=ticket_id)
        if current is None:
            raise TicketNotFoundError()
        if current.credential != credential:
            raise InvalidCredentialError()
        try:
            current.ensure_scannable()
        except AlreadyScannedError as e:
            return self._already_scanned(current, e.checked_in_at)
        raise InvalidCredentialError()

    @staticmethod
    def _already_scanned(ticket: TicketEntity, checked_in_at: datetime) -> CheckInResult:
        Logger.base.info(
            f'⚠️ [CHECK-IN] Ticket {ticket.id} already scanned at {checked_in_at.isoformat()}'
        )
        return CheckInResult(
            valid=False, already_scanned=True, ticket=ticket, checked_in_at=checked_in_at
        )
