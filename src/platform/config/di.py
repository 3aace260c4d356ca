"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.service.ticketing.app.interface.i_email_sender import IEmailSender
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.driven_adapter.credential.qr_url_renderer import QrUrlRenderer
from src.service.ticketing.driven_adapter.notification.email_ticket_notifier import (
    EmailTicketNotifier,
)
from src.service.ticketing.driven_adapter.notification.mock_email_sender import MockEmailSender
from src.service.ticketing.driven_adapter.notification.resend_email_sender import (
    ResendEmailSender,
)
from src.service.ticketing.driven_adapter.payment.mock_payment_gateway import MockPaymentGateway
from src.service.ticketing.driven_adapter.payment.stripe_payment_gateway import (
    StripePaymentGateway,
)
from src.service.ticketing.driven_adapter.repo.user_command_repo_impl import UserCommandRepoImpl
from src.service.ticketing.driven_adapter.repo.user_query_repo_impl import UserQueryRepoImpl
from src.service.ticketing.driven_adapter.security.bcrypt_password_hasher import (
    BcryptPasswordHasher,
)
from src.service.ticketing.driven_adapter.security.hmac_credential_issuer import (
    HmacCredentialIssuer,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


def build_credential_issuer(settings: Settings) -> HmacCredentialIssuer:
    return HmacCredentialIssuer(secret=settings.CREDENTIAL_SECRET.get_secret_value())


def build_payment_gateway(settings: Settings) -> IPaymentGateway:
    if settings.PAYMENT_PROVIDER == 'stripe':
        return StripePaymentGateway(
            api_key=settings.STRIPE_SECRET_KEY.get_secret_value(),
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET.get_secret_value(),
            success_url=settings.CHECKOUT_SUCCESS_URL,
            cancel_url=settings.CHECKOUT_CANCEL_URL,
            timeout_seconds=settings.PAYMENT_TIMEOUT_SECONDS,
        )
    return MockPaymentGateway(
        webhook_secret=settings.MOCK_PAYMENT_WEBHOOK_SECRET.get_secret_value()
    )


def build_email_sender(settings: Settings) -> IEmailSender:
    if settings.EMAIL_PROVIDER == 'resend':
        return ResendEmailSender(
            api_key=settings.RESEND_API_KEY.get_secret_value(),
            sender=settings.EMAIL_FROM,
            api_url=settings.RESEND_API_URL,
            timeout_seconds=settings.EMAIL_TIMEOUT_SECONDS,
        )
    return MockEmailSender(debug=settings.DEBUG)


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database session factory for the user repositories
    # (ticketing repositories get their session from the unit of work)
    database = providers.Singleton(Database, read_only=False)

    # Security
    password_hasher = providers.Singleton(BcryptPasswordHasher)
    credential_issuer = providers.Singleton(build_credential_issuer, settings=config_service)

    # Repositories (stateless - use session_factory per-request)
    user_command_repo = providers.Singleton(
        UserCommandRepoImpl, session_factory=database.provided.session
    )
    user_query_repo = providers.Singleton(
        UserQueryRepoImpl,
        session_factory=database.provided.session,
        password_hasher=password_hasher,
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth, user_query_repo=user_query_repo)

    # External collaborators, selected by settings
    payment_gateway = providers.Singleton(build_payment_gateway, settings=config_service)
    email_sender = providers.Singleton(build_email_sender, settings=config_service)
    credential_renderer = providers.Singleton(
        QrUrlRenderer, base_url=config_service.provided.CREDENTIAL_RENDER_URL
    )
    ticket_notifier = providers.Singleton(
        EmailTicketNotifier,
        email_sender=email_sender,
        credential_renderer=credential_renderer,
    )


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
