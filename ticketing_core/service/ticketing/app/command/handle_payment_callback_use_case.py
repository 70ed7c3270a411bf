from typing import Optional, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from ticketing_core.platform.config.di import Container
from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.app.dto.payment_dto import (
    CallbackOutcome,
    PaymentCallbackResult,
)
from ticketing_core.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.enum.booking_status import PaymentStatus
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingNotFoundError,
    InvalidWebhookSignatureError,
)


class HandlePaymentCallbackUseCase:
    """
    Apply the gateway's asynchronous payment result

    Callbacks can arrive late, twice, or after a cancellation:
    - success on a completed booking      -> duplicate, no change
    - failure on a completed booking      -> ignored, success wins
    - success on a cancelled unpaid booking -> cancelled/refunded with the captured reference
    - success on a cancelled refunded one -> duplicate, no change
    - failure on a cancelled booking      -> ignored
    - otherwise                           -> transition and version-checked write
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        payment_gateway: IPaymentGateway,
        booking_lock: KeyedLock,
    ) -> None:
        self.uow_factory = uow_factory
        self.payment_gateway = payment_gateway
        self.booking_lock = booking_lock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work_factory]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        booking_lock: KeyedLock = Depends(Provide[Container.booking_lock]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory, payment_gateway=payment_gateway, booking_lock=booking_lock
        )

    def verify_signature(self, *, payload: bytes, signature: Optional[str]) -> None:
        if not self.payment_gateway.verify_webhook_signature(
            payload=payload, signature=signature
        ):
            raise InvalidWebhookSignatureError()

    def _result(self, outcome: CallbackOutcome, booking: Booking) -> PaymentCallbackResult:
        metrics.record_payment_callback(result=outcome)
        return PaymentCallbackResult(outcome=outcome, booking=booking)

    @Logger.io
    async def handle_callback(
        self,
        *,
        booking_id: uuid.UUID,
        payment_reference: Optional[str],
        succeeded: bool,
        reason_code: Optional[str] = None,
    ) -> PaymentCallbackResult:
        with self.tracer.start_as_current_span(
            'use_case.handle_payment_callback',
            attributes={'booking.id': str(booking_id), 'payment.succeeded': succeeded},
        ):
            async with self.booking_lock.hold(booking_id):
                async with self.uow_factory() as uow:
                    booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
                    if booking is None:
                        raise BookingNotFoundError(booking_id)

                    if booking.is_cancelled:
                        if not succeeded:
                            Logger.base.warning(
                                f'⚠️ [CALLBACK] Ignoring failure for cancelled booking {booking_id}'
                            )
                            return self._result(CallbackOutcome.IGNORED, booking)
                        if booking.payment_status == PaymentStatus.REFUNDED:
                            return self._result(CallbackOutcome.DUPLICATE, booking)

                        updated = booking.record_late_payment(
                            payment_reference=payment_reference or ''
                        )
                        Logger.base.error(
                            f'💸 [CALLBACK] Payment {payment_reference} succeeded for cancelled '
                            f'booking {booking.booking_reference}; refund required'
                        )
                    elif booking.is_paid:
                        if succeeded:
                            return self._result(CallbackOutcome.DUPLICATE, booking)
                        Logger.base.warning(
                            f'⚠️ [CALLBACK] Failure ({reason_code}) after success ignored for '
                            f'booking {booking_id}'
                        )
                        return self._result(CallbackOutcome.IGNORED, booking)
                    elif succeeded:
                        updated = booking.mark_payment_succeeded(
                            payment_reference=payment_reference or '', count_attempt=False
                        )
                    else:
                        updated = booking.mark_payment_failed(count_attempt=False)

                    saved = await uow.booking_command_repo.update(booking=updated)
                    await uow.commit()

                Logger.base.info(
                    f'📬 [CALLBACK] Booking {saved.booking_reference} -> '
                    f'{saved.booking_status}/{saved.payment_status}'
                )
                return self._result(CallbackOutcome.APPLIED, saved)
