from typing import Optional
import uuid

from fastapi import APIRouter, Depends, Header, Request

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from ticketing_core.service.ticketing.app.command.handle_payment_callback_use_case import (
    HandlePaymentCallbackUseCase,
)
from ticketing_core.service.ticketing.app.command.process_payment_use_case import (
    ProcessPaymentUseCase,
)
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.query.get_payment_status_use_case import (
    GetPaymentStatusUseCase,
)
from ticketing_core.service.ticketing.driving_adapter.http_controller.auth.requester_auth import (
    get_requester,
)
from ticketing_core.service.ticketing.driving_adapter.http_controller.schema.booking_schema import (
    BookingResponse,
)
from ticketing_core.service.ticketing.driving_adapter.http_controller.schema.payment_schema import (
    PaymentCallbackRequest,
    PaymentCallbackResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentRequest,
    PaymentResponse,
    PaymentStatusResponse,
)


router = APIRouter()


@router.post('/process')
@Logger.io
async def process_payment(
    request: PaymentRequest,
    requester: Requester = Depends(get_requester),
    use_case: ProcessPaymentUseCase = Depends(ProcessPaymentUseCase.depends),
) -> PaymentResponse:
    result = await use_case.process_payment(
        booking_id=request.booking_id,
        payment_method_token=request.payment_method_token,
        requester=requester,
    )
    return PaymentResponse(
        outcome=result.outcome.value,
        failure_reason=result.failure_reason,
        booking=BookingResponse.from_entity(result.booking),
    )


@router.post('/intent')
@Logger.io
async def create_payment_intent(
    request: PaymentIntentRequest,
    requester: Requester = Depends(get_requester),
    use_case: CreatePaymentIntentUseCase = Depends(CreatePaymentIntentUseCase.depends),
) -> PaymentIntentResponse:
    intent = await use_case.create_intent(booking_id=request.booking_id, requester=requester)
    return PaymentIntentResponse(
        intent_id=intent.intent_id,
        client_secret=intent.client_secret,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post('/callback')
@Logger.io
async def payment_callback(
    request: Request,
    x_gateway_signature: Optional[str] = Header(default=None),
    use_case: HandlePaymentCallbackUseCase = Depends(HandlePaymentCallbackUseCase.depends),
) -> PaymentCallbackResponse:
    # Signature covers the raw bytes, so verify before parsing
    payload = await request.body()
    use_case.verify_signature(payload=payload, signature=x_gateway_signature)
    callback = PaymentCallbackRequest.model_validate_json(payload)

    result = await use_case.handle_callback(
        booking_id=callback.booking_id,
        payment_reference=callback.payment_reference,
        succeeded=callback.succeeded,
        reason_code=callback.reason_code,
    )
    return PaymentCallbackResponse(
        outcome=result.outcome.value,
        booking_status=result.booking.booking_status.value,
        payment_status=result.booking.payment_status.value,
    )


@router.get('/{booking_id}')
@Logger.io
async def get_payment_status(
    booking_id: uuid.UUID,
    requester: Requester = Depends(get_requester),
    use_case: GetPaymentStatusUseCase = Depends(GetPaymentStatusUseCase.depends),
) -> PaymentStatusResponse:
    view = await use_case.get_payment_status(booking_id=booking_id, requester=requester)
    return PaymentStatusResponse(
        booking_id=view.booking_id,
        booking_reference=view.booking_reference,
        booking_status=view.booking_status.value,
        payment_status=view.payment_status.value,
        payment_reference=view.payment_reference,
        amount=view.amount,
        currency=view.currency,
        paid_at=view.paid_at,
    )
