from urllib.parse import quote

from src.service.ticketing.app.interface.i_credential_renderer import ICredentialRenderer


class QrUrlRenderer(ICredentialRenderer):
    """Points at an external QR image service; the image is never generated here"""

    def __init__(self, *, base_url: str) -> None:
        self.base_url = base_url

    def render(self, *, credential: str) -> str:
        return f'{self.base_url}{quote(credential, safe="")}'
