from abc import ABC, abstractmethod
from typing import Optional


class IEmailSender(ABC):
    @abstractmethod
    async def send_email(
        self, *, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> bool:
        """
        Deliver one message

        Returns:
            True when the provider accepted the message. Delivery problems are
            reported through the return value or an exception; callers decide
            whether either is fatal.
        """
        pass
