"""
Business errors of the ticketing domain.

Every error carries a stable `code` so clients can branch on the reason
without parsing the human readable message.
"""

from datetime import datetime
from typing import Any, Optional

from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
)


class EventNotFoundError(NotFoundError):
    code = 'event_not_found'

    def __init__(self, message: str = 'Event not found') -> None:
        super().__init__(message)


class TierNotFoundError(NotFoundError):
    code = 'tier_not_found'

    def __init__(self, tier_id: int) -> None:
        self.tier_id = tier_id
        super().__init__(f'Ticket tier {tier_id} not found')


class OrderNotFoundError(NotFoundError):
    code = 'order_not_found'

    def __init__(self, message: str = 'Order not found') -> None:
        super().__init__(message)


class TicketNotFoundError(NotFoundError):
    code = 'ticket_not_found'

    def __init__(self, message: str = 'Ticket not found') -> None:
        super().__init__(message)


class InvalidPromoCodeError(DomainError):
    code = 'invalid_promo_code'


class TierNotOnSaleError(DomainError):
    code = 'tier_not_on_sale'


class SoldOutError(ConflictError):
    code = 'sold_out'

    def __init__(self, *, tier_id: Optional[int], tier_name: str) -> None:
        self.tier_id = tier_id
        self.tier_name = tier_name
        super().__init__(f'Not enough tickets available for {tier_name}')

    def extra_content(self) -> dict[str, Any]:
        return {'tier_id': self.tier_id}


class WrongEventError(DomainError):
    code = 'wrong_event'

    def __init__(self, message: str = 'Ticket does not belong to this event') -> None:
        super().__init__(message)


class AlreadyScannedError(ConflictError):
    code = 'already_scanned'

    def __init__(self, *, checked_in_at: datetime) -> None:
        self.checked_in_at = checked_in_at
        super().__init__('Ticket already scanned')

    def extra_content(self) -> dict[str, Any]:
        return {'checked_in_at': self.checked_in_at}


class TicketNotValidError(DomainError):
    """Scan rejected because of the ticket status (cancelled, refunded, not issued)"""

    def __init__(self, message: str, *, code: str) -> None:
        self.code = code
        super().__init__(message)


class InvalidCredentialError(DomainError):
    code = 'invalid_credential'

    def __init__(self, message: str = 'Invalid ticket credential') -> None:
        super().__init__(message)


class NotTransferableError(DomainError):
    code = 'not_transferable'


class EventPassedError(DomainError):
    code = 'event_passed'

    def __init__(self, message: str = 'Cannot transfer tickets for past events') -> None:
        super().__init__(message)


class AlreadyCheckedInError(DomainError):
    code = 'already_checked_in'

    def __init__(
        self, message: str = 'Cannot transfer tickets that have been checked in'
    ) -> None:
        super().__init__(message)


class NotOwnerError(ForbiddenError):
    code = 'not_owner'

    def __init__(self, message: str = 'You do not own this ticket') -> None:
        super().__init__(message)


class RefundNotAllowedError(DomainError):
    code = 'refund_not_allowed'


class RefundProcessorError(ExternalServiceError):
    code = 'refund_processor_error'


class PaymentSignatureError(DomainError):
    code = 'invalid_signature'
