"""
Integration tests for the SQLAlchemy ledger, repositories and unit of work

Test Focus:
1. Reservation and release persist and commit together with the booking write
2. A failing booking write rolls the reservation back in the same transaction
3. The unique booking reference surfaces as a retryable conflict
4. Version-checked updates reject stale writes
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.app.command.cancel_booking_use_case import (
    CancelBookingUseCase,
)
from ticketing_core.service.ticketing.app.command.create_booking_use_case import (
    CreateBookingUseCase,
)
from ticketing_core.service.ticketing.app.command.process_payment_use_case import (
    ProcessPaymentUseCase,
)
from ticketing_core.service.ticketing.app.dto.payment_dto import PaymentOutcome
from ticketing_core.service.ticketing.domain.entity.event_entity import Event
from ticketing_core.service.ticketing.domain.enum.booking_status import (
    BookingStatus,
    PaymentStatus,
)
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    ConcurrentBookingUpdateError,
    EventNotFoundError,
    InsufficientStockError,
    LedgerInvariantError,
)
from ticketing_core.service.ticketing.domain.value_object.attendee_info import AttendeeInfo
from ticketing_core.service.ticketing.domain.value_object.ticket_line import TicketRequestLine
from ticketing_core.service.ticketing.driven_adapter.payment.mock_payment_gateway import (
    MockPaymentGateway,
)
from ticketing_core.service.ticketing.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from ticketing_core.service.ticketing.driven_adapter.repo.booking_query_repo_impl import (
    BookingQueryRepoImpl,
)
from ticketing_core.service.ticketing.driven_adapter.repo.event_query_repo_impl import (
    EventQueryRepoImpl,
)


REFERENCE_GENERATOR = (
    'ticketing_core.service.ticketing.app.command.create_booking_use_case.'
    'generate_booking_reference'
)


def _line(name: str, quantity: int) -> TicketRequestLine:
    return TicketRequestLine(ticket_type_name=name, quantity=quantity)


async def _available(database, event_id: int, name: str) -> int:
    event = await EventQueryRepoImpl(session_factory=database.session).get_by_id(
        event_id=event_id
    )
    return event.find_ticket_type(name).available


@pytest.mark.integration
class TestSqlReservation:
    @pytest.mark.asyncio
    async def test_create_booking_persists_booking_and_decrements(
        self, uow_factory, database, concert: Event
    ) -> None:
        # Arrange
        use_case = CreateBookingUseCase(uow_factory=uow_factory)

        # Act
        booking = await use_case.create_booking(
            user_id=7,
            event_id=concert.id,
            lines=[_line('General', 2), _line('VIP', 1)],
            attendee_info=AttendeeInfo(name='Ada', email='ada@example.com'),
        )

        # Assert
        assert await _available(database, concert.id, 'General') == 98
        assert await _available(database, concert.id, 'VIP') == 0

        stored = await BookingQueryRepoImpl(session_factory=database.session).get_by_id(
            booking_id=booking.id
        )
        assert stored is not None
        assert stored.booking_reference == booking.booking_reference
        assert stored.total_amount == Decimal('300.00')
        assert [(i.ticket_type_name, i.quantity, i.unit_price) for i in stored.line_items] == [
            ('General', 2, Decimal('50.00')),
            ('VIP', 1, Decimal('200.00')),
        ]
        assert stored.attendee_info == AttendeeInfo(name='Ada', email='ada@example.com')
        assert stored.booking_status == BookingStatus.PENDING
        assert stored.version == 0

    @pytest.mark.asyncio
    async def test_shortage_leaves_everything_untouched(
        self, uow_factory, database, concert: Event
    ) -> None:
        use_case = CreateBookingUseCase(uow_factory=uow_factory)

        with pytest.raises(InsufficientStockError):
            await use_case.create_booking(
                user_id=7, event_id=concert.id, lines=[_line('General', 2), _line('VIP', 2)]
            )

        assert await _available(database, concert.id, 'General') == 100
        assert await _available(database, concert.id, 'VIP') == 1

    @pytest.mark.asyncio
    async def test_unknown_event(self, uow_factory, database) -> None:
        use_case = CreateBookingUseCase(uow_factory=uow_factory)
        with pytest.raises(EventNotFoundError):
            await use_case.create_booking(user_id=7, event_id=404, lines=[_line('General', 1)])

    @pytest.mark.asyncio
    async def test_failed_booking_write_rolls_back_reservation(
        self, uow_factory, database, concert: Event
    ) -> None:
        # Arrange
        use_case = CreateBookingUseCase(uow_factory=uow_factory)
        failing_create = AsyncMock(side_effect=RuntimeError('write failed'))

        # Act
        with patch.object(BookingCommandRepoImpl, 'create', failing_create):
            with pytest.raises(RuntimeError):
                await use_case.create_booking(
                    user_id=7, event_id=concert.id, lines=[_line('General', 5)]
                )

        # Assert
        assert await _available(database, concert.id, 'General') == 100
        assert await BookingQueryRepoImpl(session_factory=database.session).list_all() == []

    @pytest.mark.asyncio
    async def test_duplicate_reference_retries_inside_a_fresh_transaction(
        self, uow_factory, database, concert: Event
    ) -> None:
        """
        Given: BK-1111111 is taken
        When: The next booking draws BK-1111111 and then BK-2222222
        Then: The unique index rejects the first draw, the retry commits once
        """
        use_case = CreateBookingUseCase(uow_factory=uow_factory)

        with patch(REFERENCE_GENERATOR, side_effect=['BK-1111111', 'BK-1111111', 'BK-2222222']):
            await use_case.create_booking(
                user_id=7, event_id=concert.id, lines=[_line('General', 1)]
            )
            second = await use_case.create_booking(
                user_id=8, event_id=concert.id, lines=[_line('General', 1)]
            )

        assert second.booking_reference == 'BK-2222222'
        assert await _available(database, concert.id, 'General') == 98
        assert len(await BookingQueryRepoImpl(session_factory=database.session).list_all()) == 2


@pytest.mark.integration
class TestSqlBookingLifecycle:
    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(self, uow_factory, concert: Event) -> None:
        # Arrange
        booking = await CreateBookingUseCase(uow_factory=uow_factory).create_booking(
            user_id=7, event_id=concert.id, lines=[_line('General', 1)]
        )
        async with uow_factory() as uow:
            await uow.booking_command_repo.update(booking=booking.mark_payment_failed())
            await uow.commit()

        # Act & Assert: same base version again
        async with uow_factory() as uow:
            with pytest.raises(ConcurrentBookingUpdateError):
                await uow.booking_command_repo.update(
                    booking=booking.mark_payment_succeeded(payment_reference='pi_1')
                )

    @pytest.mark.asyncio
    async def test_pay_then_cancel_refunds_and_releases(
        self, uow_factory, database, concert: Event
    ) -> None:
        # Arrange
        lock = KeyedLock('booking')
        booking = await CreateBookingUseCase(uow_factory=uow_factory).create_booking(
            user_id=7, event_id=concert.id, lines=[_line('General', 2)]
        )
        payment = ProcessPaymentUseCase(
            uow_factory=uow_factory,
            payment_gateway=MockPaymentGateway(latency_seconds=0, webhook_secret='whsec_test'),
            booking_lock=lock,
        )
        cancel = CancelBookingUseCase(uow_factory=uow_factory, booking_lock=lock)

        # Act
        paid = await payment.process_payment(booking_id=booking.id, payment_method_token='tok_a')
        again = await payment.process_payment(booking_id=booking.id, payment_method_token='tok_a')
        cancelled = await cancel.cancel_booking(booking_id=booking.id, requester_id=7)
        repeated = await cancel.cancel_booking(booking_id=booking.id, requester_id=7)

        # Assert
        assert paid.outcome == PaymentOutcome.COMPLETED
        assert again.outcome == PaymentOutcome.ALREADY_PAID
        assert cancelled.booking.booking_status == BookingStatus.CANCELLED
        assert cancelled.booking.payment_status == PaymentStatus.REFUNDED
        assert repeated.already_cancelled is True
        assert await _available(database, concert.id, 'General') == 100

        stored = await BookingQueryRepoImpl(session_factory=database.session).get_by_id(
            booking_id=booking.id
        )
        assert stored.payment_reference == paid.booking.payment_reference
        assert stored.version == 2

    @pytest.mark.asyncio
    async def test_release_clamps_at_capacity(
        self, uow_factory, database, concert: Event
    ) -> None:
        async with uow_factory() as uow:
            await uow.inventory_ledger.release(event_id=concert.id, lines=[_line('VIP', 5)])
            await uow.commit()

        assert await _available(database, concert.id, 'VIP') == 1

    @pytest.mark.asyncio
    async def test_release_of_unknown_ticket_type(self, uow_factory, concert: Event) -> None:
        async with uow_factory() as uow:
            with pytest.raises(LedgerInvariantError):
                await uow.inventory_ledger.release(event_id=concert.id, lines=[_line('Pit', 1)])

    @pytest.mark.asyncio
    async def test_list_by_user_newest_first(
        self, uow_factory, database, concert: Event
    ) -> None:
        use_case = CreateBookingUseCase(uow_factory=uow_factory)
        older = await use_case.create_booking(
            user_id=7, event_id=concert.id, lines=[_line('General', 1)]
        )
        newer = await use_case.create_booking(
            user_id=7, event_id=concert.id, lines=[_line('General', 1)]
        )
        await use_case.create_booking(user_id=8, event_id=concert.id, lines=[_line('General', 1)])

        mine = await BookingQueryRepoImpl(session_factory=database.session).list_by_user(user_id=7)

        assert [b.id for b in mine] == [newer.id, older.id]


@pytest.mark.integration
class TestSqlUnitOfWork:
    @pytest.mark.asyncio
    async def test_commit_outside_async_with_raises(self, uow_factory) -> None:
        uow = uow_factory()
        with pytest.raises(RuntimeError, match='outside its async with block'):
            await uow.commit()

    @pytest.mark.asyncio
    async def test_commit_after_exit_raises(self, uow_factory) -> None:
        async with uow_factory() as uow:
            pass
        with pytest.raises(RuntimeError, match='outside its async with block'):
            await uow.commit()
