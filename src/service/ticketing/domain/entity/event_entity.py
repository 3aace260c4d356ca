from datetime import datetime
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError, ForbiddenError
from src.service.ticketing.domain.enum.event_status import EventStatus


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise DomainError(f'Event {attribute.name} cannot be empty')


@attrs.define
class EventEntity:
    title: str = attrs.field(validator=_validate_non_empty_string)
    organizer_id: int
    venue: str = attrs.field(validator=_validate_non_empty_string)
    start_at: datetime
    end_at: datetime
    description: str = ''
    address: str = ''
    city: str = ''
    category: str = ''
    timezone: str = 'UTC'
    status: EventStatus = EventStatus.DRAFT
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __attrs_post_init__(self) -> None:
        if self.end_at < self.start_at:
            raise DomainError('Event end time must be after start time')

    def is_published(self) -> bool:
        return self.status == EventStatus.PUBLISHED

    def ensure_owned_by(self, organizer_id: int) -> None:
        if self.organizer_id != organizer_id:
            raise ForbiddenError("You don't have permission to manage this event")
