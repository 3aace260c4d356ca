"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    check_in_ticket_use_case,
    confirm_payment_use_case,
    create_checkout_use_case,
    refund_order_use_case,
    transfer_ticket_use_case,
)
from src.service.ticketing.app.query import list_my_tickets_use_case, user_query_use_case
from src.service.ticketing.driving_adapter.http_controller import (
    payment_webhook_controller,
    user_controller,
)
from src.service.ticketing.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    create_checkout_use_case,
    confirm_payment_use_case,
    check_in_ticket_use_case,
    transfer_ticket_use_case,
    refund_order_use_case,
    list_my_tickets_use_case,
    user_query_use_case,
    role_auth,
    user_controller,
    payment_webhook_controller,
]
