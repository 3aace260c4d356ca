"""
Unit tests for the TicketCredential record

The decoder accepts only known versions of the `ticket` record and ignores
unknown extra keys.
"""

import uuid

import pytest

from src.service.ticketing.domain.ticketing_errors import InvalidCredentialError
from src.service.ticketing.domain.value_object.ticket_credential import TicketCredential


@pytest.fixture
def payload() -> dict:
    return TicketCredential(
        ticket_id=uuid.uuid4(), event_id=4, order_id=uuid.uuid4(), tier_id=9, nonce='n0nce'
    ).to_payload()


@pytest.mark.unit
class TestTicketCredential:
    def test_payload_is_tagged_and_versioned(self, payload: dict) -> None:
        assert payload['v'] == 1
        assert payload['typ'] == 'ticket'

    def test_from_payload_ignores_unknown_keys(self, payload: dict) -> None:
        claims = TicketCredential.from_payload({**payload, 'seat': 'A-12'})

        assert claims.event_id == 4
        assert claims.tier_id == 9
        assert str(claims.ticket_id) == payload['tid']

    @pytest.mark.parametrize(
        'mutation',
        [
            {'v': 2},
            {'v': None},
            {'typ': 'refund'},
            {'eid': '4'},
            {'eid': True},
            {'tid': 'not-a-uuid'},
            {'nonce': ''},
        ],
    )
    def test_invalid_fields_are_rejected(self, payload: dict, mutation: dict) -> None:
        with pytest.raises(InvalidCredentialError):
            TicketCredential.from_payload({**payload, **mutation})

    def test_missing_field_is_rejected(self, payload: dict) -> None:
        del payload['oid']

        with pytest.raises(InvalidCredentialError):
            TicketCredential.from_payload(payload)

    def test_non_mapping_is_rejected(self) -> None:
        with pytest.raises(InvalidCredentialError):
            TicketCredential.from_payload(['v', 1])
