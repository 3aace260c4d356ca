from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.check_in_ticket_use_case import CheckInTicketUseCase
from src.service.ticketing.app.command.transfer_ticket_use_case import TransferTicketUseCase
from src.service.ticketing.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_organizer,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    MyTicketResponse,
    TicketScanRequest,
    TicketScanResponse,
    TicketTransferRequest,
    TicketTransferResponse,
)


router = APIRouter()


@router.post('/scan', status_code=status.HTTP_200_OK)
@Logger.io
async def scan_ticket(
    request: TicketScanRequest,
    current_user: UserEntity = Depends(require_organizer),
    use_case: CheckInTicketUseCase = Depends(CheckInTicketUseCase.depends),
) -> TicketScanResponse:
    """A repeated scan is not an error: valid=false, already_scanned=true"""
    result = await use_case.check_in(
        credential=request.credential,
        organizer_id=current_user.id or 0,
        event_id=request.event_id,
    )
    return TicketScanResponse.from_result(result)


@router.post('/{ticket_id}/transfer', status_code=status.HTTP_200_OK)
@Logger.io
async def transfer_ticket(
    ticket_id: UUID,
    request: TicketTransferRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: TransferTicketUseCase = Depends(TransferTicketUseCase.depends),
) -> TicketTransferResponse:
    result = await use_case.transfer(
        ticket_id=ticket_id,
        requester_id=current_user.id or 0,
        requester_name=current_user.name,
        attendee_name=request.recipient_name,
        attendee_email=request.recipient_email,
        attendee_phone=request.recipient_phone,
    )
    return TicketTransferResponse.from_result(result)


@router.get('/my', status_code=status.HTTP_200_OK)
@Logger.io
async def list_my_tickets(
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListMyTicketsUseCase = Depends(ListMyTicketsUseCase.depends),
) -> List[MyTicketResponse]:
    views = await use_case.list_my_tickets(holder_id=current_user.id or 0)
    return [MyTicketResponse.from_view(view) for view in views]
