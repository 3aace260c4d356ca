"""
HMAC Credential Issuer

Credential wire form:

    tkt1.<base64url(orjson(payload))>.<base64url(hmac_sha256(secret, "tkt1." + payload))>

The payload is the tagged record produced by TicketCredential.to_payload().
A random nonce makes every issuance distinct, so re-issuing a ticket's
credential yields a new value and the stored column decides which one is
current.
"""

import base64
import binascii
import hashlib
import hmac
import secrets

import orjson

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_credential_issuer import ICredentialIssuer
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.ticketing_errors import InvalidCredentialError
from src.service.ticketing.domain.value_object.ticket_credential import TicketCredential


CREDENTIAL_PREFIX = 'tkt1'
NONCE_BYTES = 16


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')


def _b64decode(text: str) -> bytes:
    padding = '=' * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


class HmacCredentialIssuer(ICredentialIssuer):
    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError('Credential secret must not be empty')
        self._key = secret.encode('utf-8')

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(self._key, signing_input.encode('ascii'), hashlib.sha256).digest()
        return _b64encode(digest)

    @Logger.io
    def issue(self, *, ticket: TicketEntity) -> str:
        claims = TicketCredential(
            ticket_id=ticket.id,
            event_id=ticket.event_id,
            order_id=ticket.order_id,
            tier_id=ticket.tier_id,
            nonce=secrets.token_urlsafe(NONCE_BYTES),
        )
        body = _b64encode(orjson.dumps(claims.to_payload()))
        signing_input = f'{CREDENTIAL_PREFIX}.{body}'
        return f'{signing_input}.{self._sign(signing_input)}'

    @Logger.io
    def decode(self, *, credential: str) -> TicketCredential:
        parts = credential.strip().split('.')
        if len(parts) != 3 or parts[0] != CREDENTIAL_PREFIX:
            raise InvalidCredentialError('Invalid ticket credential format')

        prefix, body, signature = parts
        expected = self._sign(f'{prefix}.{body}')
        if not hmac.compare_digest(expected.encode('ascii'), signature.encode('ascii', 'ignore')):
            raise InvalidCredentialError('Invalid ticket credential signature')

        try:
            payload = orjson.loads(_b64decode(body))
        except (binascii.Error, ValueError, orjson.JSONDecodeError) as e:
            raise InvalidCredentialError('Invalid ticket credential format') from e

        return TicketCredential.from_payload(payload)
