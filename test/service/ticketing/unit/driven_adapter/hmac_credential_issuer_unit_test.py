"""
Unit tests for HmacCredentialIssuer

Credential form: tkt1.<payload>.<signature>
"""

import base64

import orjson
import pytest
from uuid_utils.compat import uuid7

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.ticketing_errors import InvalidCredentialError
from src.service.ticketing.driven_adapter.security.hmac_credential_issuer import (
    HmacCredentialIssuer,
)


@pytest.fixture
def issuer() -> HmacCredentialIssuer:
    return HmacCredentialIssuer(secret='unit-test-credential-secret')


@pytest.fixture
def ticket() -> TicketEntity:
    return TicketEntity.create_pending(
        order_id=uuid7(),
        event_id=12,
        tier_id=34,
        holder_id=2,
        price=5000,
        attendee_name='Test Buyer',
        attendee_email='buyer@example.com',
    )


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(orjson.dumps(data)).rstrip(b'=').decode('ascii')


@pytest.mark.unit
class TestHmacCredentialIssuer:
    def test_issued_credential_decodes_to_ticket_claims(self, issuer, ticket):
        # Act
        credential = issuer.issue(ticket=ticket)
        claims = issuer.decode(credential=credential)

        # Assert
        assert credential.startswith('tkt1.')
        assert claims.ticket_id == ticket.id
        assert claims.order_id == ticket.order_id
        assert claims.event_id == 12
        assert claims.tier_id == 34

    def test_every_issuance_is_distinct(self, issuer, ticket):
        first = issuer.issue(ticket=ticket)
        second = issuer.issue(ticket=ticket)

        assert first != second
        assert issuer.decode(credential=first).nonce != issuer.decode(credential=second).nonce

    def test_surrounding_whitespace_is_tolerated(self, issuer, ticket):
        credential = issuer.issue(ticket=ticket)

        assert issuer.decode(credential=f'  {credential}\n').ticket_id == ticket.id

    def test_tampered_payload_is_rejected(self, issuer, ticket):
        """
        Given: a valid credential
        When: the payload is swapped for another event id, signature kept
        Then: the signature check fails
        """
        # Arrange
        prefix, body, signature = issuer.issue(ticket=ticket).split('.')
        payload = orjson.loads(base64.urlsafe_b64decode(body + '=' * (-len(body) % 4)))
        payload['eid'] = 99

        # Act / Assert
        with pytest.raises(InvalidCredentialError, match='signature'):
            issuer.decode(credential=f'{prefix}.{_b64(payload)}.{signature}')

    def test_other_secret_is_rejected(self, issuer, ticket):
        foreign = HmacCredentialIssuer(secret='another-secret').issue(ticket=ticket)

        with pytest.raises(InvalidCredentialError):
            issuer.decode(credential=foreign)

    @pytest.mark.parametrize(
        'credential',
        ['', 'tkt1', 'tkt1.abc', 'tkt2.abc.def', 'a.b.c.d', 'not a credential'],
    )
    def test_malformed_credentials(self, issuer, credential):
        with pytest.raises(InvalidCredentialError):
            issuer.decode(credential=credential)

    def test_signed_unknown_version_is_rejected(self, issuer, ticket):
        """A correctly signed record with an unsupported version still fails"""
        claims = issuer.decode(credential=issuer.issue(ticket=ticket)).to_payload()
        body = _b64({**claims, 'v': 2})
        signing_input = f'tkt1.{body}'

        with pytest.raises(InvalidCredentialError, match='version'):
            issuer.decode(credential=f'{signing_input}.{issuer._sign(signing_input)}')

    def test_empty_secret_is_refused(self):
        with pytest.raises(ValueError):
            HmacCredentialIssuer(secret='')
