from enum import StrEnum


class TicketStatus(StrEnum):
    """
    pending -> confirmed -> checked_in

    cancelled and refunded are absorbing: no scan, no transfer, no way back.
    """

    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
    CHECKED_IN = 'checked_in'
