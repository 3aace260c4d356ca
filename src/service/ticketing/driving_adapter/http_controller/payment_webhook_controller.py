from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request, status

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.ticketing.app.command.fail_payment_use_case import FailPaymentUseCase
from src.service.ticketing.app.dto.payment_dto import PaymentFailed, PaymentSucceeded
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.ticketing_errors import (
    InvalidPromoCodeError,
    OrderNotFoundError,
    SoldOutError,
)
from src.service.ticketing.driving_adapter.http_controller.schema.checkout_schema import (
    WebhookAck,
)


router = APIRouter()


@router.post('/webhook', status_code=status.HTTP_200_OK)
@Logger.io
@inject
async def payment_webhook(
    request: Request,
    payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    confirm_use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
    fail_use_case: FailPaymentUseCase = Depends(FailPaymentUseCase.depends),
) -> WebhookAck:
    """
    Processor callback

    A bad signature is a 400. Business outcomes that a retry cannot change
    (unknown order, sold out, rejected) are acknowledged with 200 so the
    processor stops redelivering; the critical log is the operator alert.
    """
    payload = await request.body()
    signal = payment_gateway.parse_webhook(
        payload=payload, signature=request.headers.get(payment_gateway.signature_header)
    )

    if signal is None:
        return WebhookAck(status='ignored')

    if isinstance(signal, PaymentFailed):
        await fail_use_case.fail_payment(signal=signal)
        return WebhookAck(status='failed' if signal.final else 'declined')

    assert isinstance(signal, PaymentSucceeded)
    try:
        result = await confirm_use_case.confirm_payment(signal=signal)
    except OrderNotFoundError:
        return WebhookAck(status='order_not_found')
    except SoldOutError:
        return WebhookAck(status='sold_out')
    except InvalidPromoCodeError:
        return WebhookAck(status='promo_exhausted')
    except DomainError:
        return WebhookAck(status='rejected')

    return WebhookAck(status=result.status.value)
