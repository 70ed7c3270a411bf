import time
from typing import Optional, Self
import uuid

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from ticketing_core.platform.config.core_setting import settings
from ticketing_core.platform.config.di import Container
from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.app.dto.payment_dto import (
    GatewayChargeOutcome,
    PaymentOutcome,
    PaymentResult,
)
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingNotFoundError,
    ConcurrentBookingUpdateError,
    InvalidBookingStateError,
    PaymentGatewayUnavailableError,
)


class ProcessPaymentUseCase:
    """
    Charge a pending booking and reconcile its state with the gateway's answer

    Flow:
    1. Load booking, check access, short-circuit when already paid
    2. Charge through the gateway with a per-attempt idempotency key, bounded by
       PAYMENT_GATEWAY_TIMEOUT_SECONDS
    3. Record the outcome with a version-checked write:
       - success  -> confirmed/completed (payment_reference, paid_at)
       - decline  -> pending/failed, reservation kept, caller may retry
       - timeout / transport error -> pending/failed, then PaymentGatewayUnavailableError;
         the attempt is not counted, so a retry reuses the same idempotency key

    No database transaction is held open across the gateway call.
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

    async def _load(self, booking_id: uuid.UUID) -> Booking:
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def _save(self, booking: Booking) -> Booking:
        async with self.uow_factory() as uow:
            saved = await uow.booking_command_repo.update(booking=booking)
            await uow.commit()
        return saved

    async def _charge(self, booking: Booking, payment_method_token: str) -> GatewayChargeOutcome:
        started = time.perf_counter()
        result = 'unavailable'
        try:
            with anyio.fail_after(settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS):
                outcome = await self.payment_gateway.charge(
                    amount=booking.total_amount,
                    currency=settings.PAYMENT_CURRENCY,
                    idempotency_key=booking.next_payment_idempotency_key(),
                    payment_method_token=payment_method_token,
                    metadata={
                        'booking_id': str(booking.id),
                        'booking_reference': booking.booking_reference,
                        'user_id': str(booking.user_id),
                    },
                )
            result = 'succeeded' if outcome.is_success else 'declined'
            return outcome
        except TimeoutError as e:
            result = 'timeout'
            raise PaymentGatewayUnavailableError(
                f'Payment gateway did not answer within {settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS}s'
            ) from e
        finally:
            metrics.record_gateway_call(
                operation='charge', result=result, duration=time.perf_counter() - started
            )

    @Logger.io
    async def process_payment(
        self,
        *,
        booking_id: uuid.UUID,
        payment_method_token: str,
        requester: Optional[Requester] = None,
    ) -> PaymentResult:
        with self.tracer.start_as_current_span(
            'use_case.process_payment', attributes={'booking.id': str(booking_id)}
        ):
            async with self.booking_lock.hold(booking_id):
                booking = await self._load(booking_id)

                if requester is not None and not requester.can_access(booking.user_id):
                    raise ForbiddenError('Only the booking owner can pay for this booking')

                if booking.is_paid:
                    metrics.record_payment_attempt(outcome=PaymentOutcome.ALREADY_PAID)
                    return PaymentResult(outcome=PaymentOutcome.ALREADY_PAID, booking=booking)

                if booking.is_cancelled:
                    raise InvalidBookingStateError('Cannot pay for a cancelled booking')

                try:
                    outcome = await self._charge(booking, payment_method_token)
                except PaymentGatewayUnavailableError:
                    metrics.record_payment_attempt(outcome='unavailable')
                    await self._record_failed_attempt(booking)
                    raise

                if outcome.is_success:
                    return await self._record_success(booking, outcome)
                return await self._record_decline(booking, outcome)

    async def _record_success(
        self, booking: Booking, outcome: GatewayChargeOutcome
    ) -> PaymentResult:
        paid = booking.mark_payment_succeeded(payment_reference=outcome.reference or '')
        try:
            saved = await self._save(paid)
        except ConcurrentBookingUpdateError:
            current = await self._load(booking.id)
            if current.is_paid:
                metrics.record_payment_attempt(outcome=PaymentOutcome.ALREADY_PAID)
                return PaymentResult(outcome=PaymentOutcome.ALREADY_PAID, booking=current)
            Logger.base.critical(
                f'🚨 [PAYMENT] Charge {outcome.reference} succeeded but booking {booking.id} '
                f'changed to {current.booking_status}/{current.payment_status}; needs reconciliation'
            )
            raise

        metrics.record_payment_attempt(outcome=PaymentOutcome.COMPLETED)
        Logger.base.info(
            f'💳 [PAYMENT] Booking {saved.booking_reference} paid, reference {saved.payment_reference}'
        )
        return PaymentResult(outcome=PaymentOutcome.COMPLETED, booking=saved)

    async def _record_decline(
        self, booking: Booking, outcome: GatewayChargeOutcome
    ) -> PaymentResult:
        try:
            saved = await self._save(booking.mark_payment_failed())
        except ConcurrentBookingUpdateError:
            current = await self._load(booking.id)
            if current.is_paid:
                metrics.record_payment_attempt(outcome=PaymentOutcome.ALREADY_PAID)
                return PaymentResult(outcome=PaymentOutcome.ALREADY_PAID, booking=current)
            raise

        metrics.record_payment_attempt(outcome=PaymentOutcome.FAILED)
        Logger.base.info(
            f'🚫 [PAYMENT] Booking {saved.booking_reference} declined: {outcome.reason_code}'
        )
        return PaymentResult(
            outcome=PaymentOutcome.FAILED, booking=saved, failure_reason=outcome.reason_code
        )

    async def _record_failed_attempt(self, booking: Booking) -> None:
        # The charge may have been captured, keep the key so a retry replays it
        try:
            await self._save(booking.mark_payment_failed(count_attempt=False))
        except ConcurrentBookingUpdateError:
            # The unavailability error still reaches the caller; the booking moved on without us
            Logger.base.warning(
                f'⚠️ [PAYMENT] Booking {booking.id} changed while recording a gateway failure'
            )
