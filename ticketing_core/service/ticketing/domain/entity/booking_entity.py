from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
import uuid

import attrs
from uuid_utils import uuid7

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.domain.booking_state_machine import (
    BookingEvent,
    is_legal_state,
    transition,
)
from ticketing_core.service.ticketing.domain.enum.booking_status import (
    BookingStatus,
    PaymentStatus,
)
from ticketing_core.service.ticketing.domain.enum.payment_method import PaymentMethod
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    InvalidBookingRequestError,
    InvalidBookingStateError,
)
from ticketing_core.service.ticketing.domain.value_object.attendee_info import AttendeeInfo
from ticketing_core.service.ticketing.domain.value_object.ticket_line import LineItem


CENT = Decimal('0.01')


def new_booking_id() -> uuid.UUID:
    # uuid_utils generates the time-ordered UUID7; storage and pydantic speak stdlib UUID
    return uuid.UUID(str(uuid7()))


def compute_total_amount(line_items: List[LineItem]) -> Decimal:
    return sum((item.subtotal for item in line_items), Decimal('0')).quantize(CENT)


@attrs.define
class Booking:
    id: uuid.UUID
    booking_reference: str
    user_id: int
    event_id: int
    line_items: List[LineItem]
    total_amount: Decimal
    booking_status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    attendee_info: Optional[AttendeeInfo] = None
    payment_reference: Optional[str] = None
    payment_attempts: int = 0
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    def __attrs_post_init__(self) -> None:
        if not is_legal_state(self.booking_status, self.payment_status):
            raise InvalidBookingStateError(
                f'Illegal booking state {self.booking_status}/{self.payment_status}'
            )

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        user_id: int,
        event_id: int,
        booking_reference: str,
        line_items: List[LineItem],
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        attendee_info: Optional[AttendeeInfo] = None,
    ) -> 'Booking':
        if not line_items:
            raise InvalidBookingRequestError('A booking needs at least one line item')

        now = datetime.now(timezone.utc)
        return cls(
            id=new_booking_id(),
            booking_reference=booking_reference,
            user_id=user_id,
            event_id=event_id,
            line_items=list(line_items),
            total_amount=compute_total_amount(line_items),
            booking_status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_method=payment_method,
            attendee_info=attendee_info,
            created_at=now,
            updated_at=now,
        )

    # ========== Queries ==========

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self.booking_status == BookingStatus.CANCELLED

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    def next_payment_idempotency_key(self) -> str:
        """Stable until the gateway gives a definitive answer, fresh after a success or decline."""
        return f'booking-{self.id}-attempt-{self.payment_attempts + 1}'

    # ========== Transitions ==========

    def _apply(self, event: BookingEvent, **changes) -> 'Booking':
        booking_status, payment_status = transition(
            booking_status=self.booking_status,
            payment_status=self.payment_status,
            event=event,
        )
        return attrs.evolve(
            self,
            booking_status=booking_status,
            payment_status=payment_status,
            updated_at=datetime.now(timezone.utc),
            **changes,
        )

    @Logger.io
    def mark_payment_succeeded(
        self, *, payment_reference: str, count_attempt: bool = True
    ) -> 'Booking':
        now = datetime.now(timezone.utc)
        return self._apply(
            BookingEvent.PAYMENT_SUCCEEDED,
            payment_reference=payment_reference,
            paid_at=now,
            payment_attempts=self.payment_attempts + (1 if count_attempt else 0),
        )

    @Logger.io
    def mark_payment_failed(self, *, count_attempt: bool = True) -> 'Booking':
        return self._apply(
            BookingEvent.PAYMENT_FAILED,
            payment_attempts=self.payment_attempts + (1 if count_attempt else 0),
        )

    @Logger.io
    def record_late_payment(self, *, payment_reference: str) -> 'Booking':
        """Money captured after cancellation; the booking is owed a refund."""
        return self._apply(
            BookingEvent.LATE_PAYMENT_CAPTURED,
            payment_reference=payment_reference,
            paid_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def cancel(self) -> 'Booking':
        """
        Cancel booking. A paid booking becomes refunded; an unpaid one keeps its payment status.

        Raises:
            InvalidBookingStateError: When the booking is already cancelled
        """
        return self._apply(BookingEvent.CANCELLED, cancelled_at=datetime.now(timezone.utc))
