from enum import StrEnum


class PayoutStatus(StrEnum):
    PENDING = 'pending'
    SCHEDULED = 'scheduled'
    PAID = 'paid'
    FAILED = 'failed'
