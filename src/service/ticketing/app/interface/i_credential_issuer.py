from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.value_object.ticket_credential import TicketCredential


class ICredentialIssuer(ABC):
    @abstractmethod
    def issue(self, *, ticket: TicketEntity) -> str:
        """Fresh opaque credential; every call returns a different value"""
        pass

    @abstractmethod
    def decode(self, *, credential: str) -> TicketCredential:
        """
        Raises:
            InvalidCredentialError: malformed, forged, or unsupported version
        """
        pass
