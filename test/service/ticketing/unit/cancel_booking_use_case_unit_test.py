"""
Unit tests for CancelBookingUseCase

Test Focus:
1. Cancelling gives back exactly the booked quantities
2. Paid bookings become cancelled/refunded
3. Cancelling twice is an idempotent success that releases nothing more
4. Owner or admin only
5. A failing release rolls the status change back
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.service.ticketing.app.command.cancel_booking_use_case import (
    CancelBookingUseCase,
)
from ticketing_core.service.ticketing.app.command.create_booking_use_case import (
    CreateBookingUseCase,
)
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking, new_booking_id
from ticketing_core.service.ticketing.domain.entity.event_entity import Event
from ticketing_core.service.ticketing.domain.enum.booking_status import (
    BookingStatus,
    PaymentStatus,
)
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingNotFoundError,
    LedgerInvariantError,
)
from ticketing_core.service.ticketing.domain.value_object.ticket_line import TicketRequestLine
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_inventory_ledger import (
    InMemoryInventoryLedger,
)


@pytest.fixture
def use_case(uow_factory, booking_lock) -> CancelBookingUseCase:
    return CancelBookingUseCase(uow_factory=uow_factory, booking_lock=booking_lock)


@pytest.mark.unit
class TestCancelBooking:
    @pytest.mark.asyncio
    async def test_cancel_releases_exact_quantities(
        self,
        use_case: CancelBookingUseCase,
        create_booking_use_case: CreateBookingUseCase,
        concert: Event,
        available,
    ) -> None:
        """
        Given: A booking for General x3 and VIP x1
        When: The owner cancels it
        Then: cancelled/pending, General back to 100, VIP back to 1
        """
        # Arrange
        booking = await create_booking_use_case.create_booking(
            user_id=7,
            event_id=concert.id,
            lines=[
                TicketRequestLine(ticket_type_name='General', quantity=3),
                TicketRequestLine(ticket_type_name='VIP', quantity=1),
            ],
        )
        assert available(concert.id, 'General') == 97

        # Act
        result = await use_case.cancel_booking(booking_id=booking.id, requester_id=7)

        # Assert
        assert result.already_cancelled is False
        assert result.booking.booking_status == BookingStatus.CANCELLED
        assert result.booking.payment_status == PaymentStatus.PENDING
        assert result.booking.cancelled_at is not None
        assert available(concert.id, 'General') == 100
        assert available(concert.id, 'VIP') == 1

    @pytest.mark.asyncio
    async def test_cancel_paid_booking_is_refunded(
        self, use_case: CancelBookingUseCase, pending_booking: Booking, uow_factory, available
    ) -> None:
        # Arrange
        async with uow_factory() as uow:
            await uow.booking_command_repo.update(
                booking=pending_booking.mark_payment_succeeded(payment_reference='pi_1')
            )
            await uow.commit()

        # Act
        result = await use_case.cancel_booking(booking_id=pending_booking.id, requester_id=7)

        # Assert
        assert result.booking.booking_status == BookingStatus.CANCELLED
        assert result.booking.payment_status == PaymentStatus.REFUNDED
        assert available(pending_booking.event_id, 'General') == 100

    @pytest.mark.asyncio
    async def test_second_cancel_is_idempotent(
        self, use_case: CancelBookingUseCase, pending_booking: Booking, store, available
    ) -> None:
        # Arrange
        first = await use_case.cancel_booking(booking_id=pending_booking.id, requester_id=7)

        # Act
        second = await use_case.cancel_booking(booking_id=pending_booking.id, requester_id=7)

        # Assert
        assert second.already_cancelled is True
        assert second.booking.version == first.booking.version
        assert store.bookings[pending_booking.id].version == first.booking.version
        assert available(pending_booking.event_id, 'General') == 100

    @pytest.mark.asyncio
    async def test_concurrent_cancels_release_once(
        self, use_case: CancelBookingUseCase, pending_booking: Booking, available
    ) -> None:
        results = await asyncio.gather(
            use_case.cancel_booking(booking_id=pending_booking.id, requester_id=7),
            use_case.cancel_booking(booking_id=pending_booking.id, requester_id=7),
        )

        assert sorted(r.already_cancelled for r in results) == [False, True]
        assert available(pending_booking.event_id, 'General') == 100

    @pytest.mark.asyncio
    async def test_admin_can_cancel_any_booking(
        self, use_case: CancelBookingUseCase, pending_booking: Booking
    ) -> None:
        result = await use_case.cancel_booking(
            booking_id=pending_booking.id, requester_id=1, requester_is_admin=True
        )
        assert result.booking.is_cancelled

    @pytest.mark.asyncio
    async def test_other_user_cannot_cancel(
        self, use_case: CancelBookingUseCase, pending_booking: Booking, available
    ) -> None:
        with pytest.raises(ForbiddenError):
            await use_case.cancel_booking(booking_id=pending_booking.id, requester_id=8)
        assert available(pending_booking.event_id, 'General') == 98

    @pytest.mark.asyncio
    async def test_unknown_booking(self, use_case: CancelBookingUseCase) -> None:
        with pytest.raises(BookingNotFoundError):
            await use_case.cancel_booking(booking_id=new_booking_id(), requester_id=7)

    @pytest.mark.asyncio
    async def test_failed_release_keeps_booking_active(
        self, use_case: CancelBookingUseCase, pending_booking: Booking, store
    ) -> None:
        # Arrange
        failing_release = AsyncMock(side_effect=LedgerInvariantError('ticket type is gone'))

        # Act
        with patch.object(InMemoryInventoryLedger, 'release', failing_release):
            with pytest.raises(LedgerInvariantError):
                await use_case.cancel_booking(booking_id=pending_booking.id, requester_id=7)

        # Assert
        stored = store.bookings[pending_booking.id]
        assert stored.booking_status == BookingStatus.PENDING
        assert stored.version == pending_booking.version
