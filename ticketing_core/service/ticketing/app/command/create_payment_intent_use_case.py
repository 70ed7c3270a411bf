import time
from typing import Self
import uuid

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from ticketing_core.platform.config.core_setting import settings
from ticketing_core.platform.config.di import Container
from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.service.ticketing.app.dto.payment_dto import PaymentIntent
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingNotFoundError,
    InvalidBookingStateError,
    PaymentGatewayUnavailableError,
)


class CreatePaymentIntentUseCase:
    """Ask the gateway for a client secret so the buyer's browser can confirm the payment."""

    def __init__(self, *, uow_factory: UnitOfWorkFactory, payment_gateway: IPaymentGateway) -> None:
        self.uow_factory = uow_factory
        self.payment_gateway = payment_gateway

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work_factory]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow_factory=uow_factory, payment_gateway=payment_gateway)

    @Logger.io
    async def create_intent(self, *, booking_id: uuid.UUID, requester: Requester) -> PaymentIntent:
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)

        if not booking.is_owned_by(requester.user_id):
            raise ForbiddenError('Only the booking owner can pay for this booking')
        if booking.is_paid:
            raise InvalidBookingStateError('Booking is already paid')
        if booking.is_cancelled:
            raise InvalidBookingStateError('Cannot pay for a cancelled booking')

        started = time.perf_counter()
        result = 'unavailable'
        try:
            with anyio.fail_after(settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS):
                intent = await self.payment_gateway.create_intent(
                    amount=booking.total_amount,
                    currency=settings.PAYMENT_CURRENCY,
                    idempotency_key=f'booking-{booking.id}-intent-{booking.payment_attempts + 1}',
                    metadata={
                        'booking_id': str(booking.id),
                        'booking_reference': booking.booking_reference,
                        'user_id': str(booking.user_id),
                    },
                )
            result = 'succeeded'
        except TimeoutError as e:
            result = 'timeout'
            raise PaymentGatewayUnavailableError('Payment gateway did not answer in time') from e
        finally:
            metrics.record_gateway_call(
                operation='create_intent', result=result, duration=time.perf_counter() - started
            )

        Logger.base.info(f'🧾 [INTENT] {intent.intent_id} for booking {booking.booking_reference}')
        return intent
