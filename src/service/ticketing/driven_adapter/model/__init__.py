"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.event_model import EventModel
from src.service.ticketing.driven_adapter.model.order_model import OrderModel
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.ticketing.driven_adapter.model.payout_model import PayoutModel
from src.service.ticketing.driven_adapter.model.promo_code_model import PromoCodeModel
from src.service.ticketing.driven_adapter.model.refund_model import RefundModel
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel
from src.service.ticketing.driven_adapter.model.ticket_tier_model import TicketTierModel
from src.service.ticketing.driven_adapter.model.user_model import UserModel

__all__ = [
    'EventModel',
    'OrderModel',
    'PaymentModel',
    'PayoutModel',
    'PromoCodeModel',
    'RefundModel',
    'TicketModel',
    'TicketTierModel',
    'UserModel',
]
