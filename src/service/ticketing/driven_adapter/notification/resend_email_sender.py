from typing import Optional

import httpx

from src.platform.exception.exceptions import ExternalServiceError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_email_sender import IEmailSender


class ResendEmailSender(IEmailSender):
    """Delivers through the Resend HTTP API (POST /emails)"""

    def __init__(
        self, *, api_key: str, sender: str, api_url: str, timeout_seconds: float = 10.0
    ) -> None:
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds

    @Logger.io
    async def send_email(
        self, *, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> bool:
        body = {'from': self.sender, 'to': [to], 'subject': subject, 'text': text}
        if html:
            body['html'] = html

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    self.api_url,
                    json=body,
                    headers={'Authorization': f'Bearer {self.api_key}'},
                )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f'Email provider unreachable: {e}') from e

        if response.is_error:
            Logger.base.warning(
                f'📧 [EMAIL] Resend rejected message to {to}: '
                f'{response.status_code} {response.text[:200]}'
            )
            return False

        Logger.base.info(f'📧 [EMAIL] Sent "{subject}" to {to} (id={response.json().get("id")})')
        return True
