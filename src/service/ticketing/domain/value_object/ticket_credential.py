from typing import Any, ClassVar
from uuid import UUID

import attrs

from src.service.ticketing.domain.ticketing_errors import InvalidCredentialError


@attrs.frozen
class TicketCredential:
    """
    Claims carried inside a ticket credential.

    The wire form is a tagged record: `v` is the schema version and `typ` the
    record kind. Decoding accepts only versions listed in SUPPORTED_VERSIONS
    and ignores unknown extra keys so later versions can add fields without
    breaking credentials already printed.
    """

    KIND: ClassVar[str] = 'ticket'
    CURRENT_VERSION: ClassVar[int] = 1
    SUPPORTED_VERSIONS: ClassVar[frozenset[int]] = frozenset({1})

    ticket_id: UUID
    event_id: int
    order_id: UUID
    tier_id: int
    nonce: str
    version: int = CURRENT_VERSION

    def to_payload(self) -> dict[str, Any]:
        return {
            'v': self.version,
            'typ': self.KIND,
            'tid': str(self.ticket_id),
            'eid': self.event_id,
            'oid': str(self.order_id),
            'trid': self.tier_id,
            'nonce': self.nonce,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> 'TicketCredential':
        if not isinstance(payload, dict):
            raise InvalidCredentialError('Invalid ticket credential format')

        version = payload.get('v')
        if version not in cls.SUPPORTED_VERSIONS:
            raise InvalidCredentialError(f'Unsupported credential version: {version}')
        if payload.get('typ') != cls.KIND:
            raise InvalidCredentialError('Credential is not a ticket credential')

        try:
            return cls(
                ticket_id=UUID(payload['tid']),
                event_id=_require_int(payload['eid']),
                order_id=UUID(payload['oid']),
                tier_id=_require_int(payload['trid']),
                nonce=_require_str(payload['nonce']),
                version=version,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidCredentialError('Invalid ticket data') from e


def _require_int(value: Any) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f'expected int, got {type(value).__name__}')
    return value


def _require_str(value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise TypeError('expected non-empty str')
    return value
