from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.service.ticketing.app.dto.ticketing_result import (
    CheckInResult,
    TicketView,
    TransferResult,
)
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class TicketScanRequest(BaseModel):
    event_id: int
    credential: str = Field(..., min_length=1)


class TicketTransferRequest(BaseModel):
    recipient_name: str = Field(..., min_length=1, max_length=255)
    recipient_email: EmailStr
    recipient_phone: Optional[str] = Field(default=None, max_length=20)

    class Config:
        json_schema_extra = {
            'example': {
                'recipient_name': 'Jane Doe',
                'recipient_email': 'jane@example.com',
                'recipient_phone': '+15550100',
            }
        }


class TicketResponse(BaseModel):
    id: UUID
    order_id: UUID
    event_id: int
    tier_id: int
    price: int
    status: TicketStatus
    attendee_name: str
    attendee_email: str
    attendee_phone: Optional[str]
    checked_in_at: Optional[datetime]

    @classmethod
    def from_entity(cls, ticket: TicketEntity) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            order_id=ticket.order_id,
            event_id=ticket.event_id,
            tier_id=ticket.tier_id,
            price=ticket.price,
            status=ticket.status,
            attendee_name=ticket.attendee_name,
            attendee_email=ticket.attendee_email,
            attendee_phone=ticket.attendee_phone,
            checked_in_at=ticket.checked_in_at,
        )


class MyTicketResponse(TicketResponse):
    tier_name: str
    event_title: str
    qr_code_url: Optional[str]

    @classmethod
    def from_view(cls, view: TicketView) -> 'MyTicketResponse':
        return cls(
            **TicketResponse.from_entity(view.ticket).model_dump(),
            tier_name=view.tier_name,
            event_title=view.event_title,
            qr_code_url=view.credential_uri,
        )


class TicketScanResponse(BaseModel):
    valid: bool
    already_scanned: bool
    checked_in_at: datetime
    ticket: TicketResponse

    @classmethod
    def from_result(cls, result: CheckInResult) -> 'TicketScanResponse':
        return cls(
            valid=result.valid,
            already_scanned=result.already_scanned,
            checked_in_at=result.checked_in_at,
            ticket=TicketResponse.from_entity(result.ticket),
        )


class TicketTransferResponse(BaseModel):
    ticket: TicketResponse
    notification_sent: bool

    @classmethod
    def from_result(cls, result: TransferResult) -> 'TicketTransferResponse':
        return cls(
            ticket=TicketResponse.from_entity(result.ticket),
            notification_sent=result.notification_sent,
        )
