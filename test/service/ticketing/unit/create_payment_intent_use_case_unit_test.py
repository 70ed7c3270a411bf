from decimal import Decimal

import pytest

from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.service.ticketing.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.ticketing_errors import InvalidBookingStateError


@pytest.fixture
def use_case(uow_factory, gateway) -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(uow_factory=uow_factory, payment_gateway=gateway)


@pytest.mark.unit
class TestCreatePaymentIntent:
    @pytest.mark.asyncio
    async def test_intent_for_pending_booking(
        self, use_case: CreatePaymentIntentUseCase, pending_booking: Booking
    ) -> None:
        intent = await use_case.create_intent(
            booking_id=pending_booking.id, requester=Requester(user_id=7)
        )

        assert intent.amount == Decimal('100.00')
        assert intent.currency == 'usd'
        assert intent.client_secret.startswith(intent.intent_id)

    @pytest.mark.asyncio
    async def test_same_attempt_returns_same_intent(
        self, use_case: CreatePaymentIntentUseCase, pending_booking: Booking
    ) -> None:
        first = await use_case.create_intent(
            booking_id=pending_booking.id, requester=Requester(user_id=7)
        )
        second = await use_case.create_intent(
            booking_id=pending_booking.id, requester=Requester(user_id=7)
        )

        assert first == second

    @pytest.mark.asyncio
    async def test_paid_booking_has_no_intent(
        self, use_case: CreatePaymentIntentUseCase, pending_booking: Booking, uow_factory
    ) -> None:
        async with uow_factory() as uow:
            await uow.booking_command_repo.update(
                booking=pending_booking.mark_payment_succeeded(payment_reference='pi_1')
            )
            await uow.commit()

        with pytest.raises(InvalidBookingStateError, match='already paid'):
            await use_case.create_intent(
                booking_id=pending_booking.id, requester=Requester(user_id=7)
            )

    @pytest.mark.asyncio
    async def test_only_owner(
        self, use_case: CreatePaymentIntentUseCase, pending_booking: Booking
    ) -> None:
        with pytest.raises(ForbiddenError):
            await use_case.create_intent(
                booking_id=pending_booking.id, requester=Requester(user_id=8, is_admin=True)
            )
