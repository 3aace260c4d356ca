"""Ticketing Domain Enums"""

from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.enum.order_status import OrderStatus, PaymentStatus, RefundStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus

__all__ = ['EventStatus', 'OrderStatus', 'PaymentStatus', 'RefundStatus', 'TicketStatus']
