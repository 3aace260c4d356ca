"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_credential_issuer import ICredentialIssuer
from src.service.ticketing.app.interface.i_credential_renderer import ICredentialRenderer
from src.service.ticketing.app.interface.i_email_sender import IEmailSender
from src.service.ticketing.app.interface.i_event_repo import IEventRepo
from src.service.ticketing.app.interface.i_order_repo import IOrderRepo
from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.ticketing.app.interface.i_payout_repo import IPayoutRepo
from src.service.ticketing.app.interface.i_promo_code_repo import IPromoCodeRepo
from src.service.ticketing.app.interface.i_refund_repo import IRefundRepo
from src.service.ticketing.app.interface.i_ticket_notifier import ITicketNotifier
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.ticketing.app.interface.i_ticket_tier_repo import ITicketTierRepo
from src.service.ticketing.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.ticketing.app.interface.i_user_query_repo import IUserQueryRepo

__all__ = [
    'ICredentialIssuer',
    'ICredentialRenderer',
    'IEmailSender',
    'IEventRepo',
    'IOrderRepo',
    'IPasswordHasher',
    'IPaymentGateway',
    'IPaymentRepo',
    'IPayoutRepo',
    'IPromoCodeRepo',
    'IRefundRepo',
    'ITicketNotifier',
    'ITicketRepo',
    'ITicketTierRepo',
    'IUserCommandRepo',
    'IUserQueryRepo',
]
