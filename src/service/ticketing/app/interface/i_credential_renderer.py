from abc import ABC, abstractmethod


class ICredentialRenderer(ABC):
    """Turns an opaque credential into something scannable (QR image URI)"""

    @abstractmethod
    def render(self, *, credential: str) -> str:
        pass
