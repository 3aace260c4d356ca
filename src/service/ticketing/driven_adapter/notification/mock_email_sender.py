"""Mock email sender that logs instead of delivering"""

from datetime import datetime, timezone
from typing import List, Optional

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_email_sender import IEmailSender


class MockEmailSender(IEmailSender):
    def __init__(self, debug: bool = True):
        self.debug = debug
        self.sent_emails: List[dict] = []  # Outbox for tests

    @Logger.io
    async def send_email(
        self, *, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> bool:
        email_data = {
            'to': to,
            'subject': subject,
            'text': text,
            'html': html,
            'sent_at': datetime.now(timezone.utc),
        }
        self.sent_emails.append(email_data)

        if self.debug:
            Logger.base.info(
                f'📧 [EMAIL] Mock email to {to} | {subject}\n{"-" * 50}\n{text}\n{"-" * 50}'
            )

        return True
