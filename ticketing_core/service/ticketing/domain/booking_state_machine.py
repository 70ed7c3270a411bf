"""
Booking state machine

Booking status and payment status are two fields of one state. Every change goes through
`transition`, which validates the pair together; there is no other way to move a booking.

    pending/pending   --payment_succeeded--> confirmed/completed
    pending/pending   --payment_failed-----> pending/failed
    pending/failed    --payment_succeeded--> confirmed/completed
    pending/failed    --payment_failed-----> pending/failed
    confirmed/completed --cancelled--------> cancelled/refunded
    pending/pending   --cancelled----------> cancelled/pending
    pending/failed    --cancelled----------> cancelled/failed
    cancelled/pending --late_payment_captured--> cancelled/refunded
    cancelled/failed  --late_payment_captured--> cancelled/refunded
"""

from enum import StrEnum

from ticketing_core.service.ticketing.domain.enum.booking_status import (
    BookingStatus,
    PaymentStatus,
)
from ticketing_core.service.ticketing.domain.ticketing_errors import InvalidBookingStateError


class BookingEvent(StrEnum):
    PAYMENT_SUCCEEDED = 'payment_succeeded'
    PAYMENT_FAILED = 'payment_failed'
    CANCELLED = 'cancelled'
    LATE_PAYMENT_CAPTURED = 'late_payment_captured'


BookingState = tuple[BookingStatus, PaymentStatus]

LEGAL_STATES: frozenset[BookingState] = frozenset(
    {
        (BookingStatus.PENDING, PaymentStatus.PENDING),
        (BookingStatus.PENDING, PaymentStatus.FAILED),
        (BookingStatus.CONFIRMED, PaymentStatus.COMPLETED),
        (BookingStatus.CANCELLED, PaymentStatus.REFUNDED),
        (BookingStatus.CANCELLED, PaymentStatus.PENDING),
        (BookingStatus.CANCELLED, PaymentStatus.FAILED),
    }
)

_TRANSITIONS: dict[tuple[BookingStatus, PaymentStatus, BookingEvent], BookingState] = {
    (BookingStatus.PENDING, PaymentStatus.PENDING, BookingEvent.PAYMENT_SUCCEEDED): (
        BookingStatus.CONFIRMED,
        PaymentStatus.COMPLETED,
    ),
    (BookingStatus.PENDING, PaymentStatus.PENDING, BookingEvent.PAYMENT_FAILED): (
        BookingStatus.PENDING,
        PaymentStatus.FAILED,
    ),
    (BookingStatus.PENDING, PaymentStatus.FAILED, BookingEvent.PAYMENT_SUCCEEDED): (
        BookingStatus.CONFIRMED,
        PaymentStatus.COMPLETED,
    ),
    (BookingStatus.PENDING, PaymentStatus.FAILED, BookingEvent.PAYMENT_FAILED): (
        BookingStatus.PENDING,
        PaymentStatus.FAILED,
    ),
    (BookingStatus.CONFIRMED, PaymentStatus.COMPLETED, BookingEvent.CANCELLED): (
        BookingStatus.CANCELLED,
        PaymentStatus.REFUNDED,
    ),
    (BookingStatus.PENDING, PaymentStatus.PENDING, BookingEvent.CANCELLED): (
        BookingStatus.CANCELLED,
        PaymentStatus.PENDING,
    ),
    (BookingStatus.PENDING, PaymentStatus.FAILED, BookingEvent.CANCELLED): (
        BookingStatus.CANCELLED,
        PaymentStatus.FAILED,
    ),
    (BookingStatus.CANCELLED, PaymentStatus.PENDING, BookingEvent.LATE_PAYMENT_CAPTURED): (
        BookingStatus.CANCELLED,
        PaymentStatus.REFUNDED,
    ),
    (BookingStatus.CANCELLED, PaymentStatus.FAILED, BookingEvent.LATE_PAYMENT_CAPTURED): (
        BookingStatus.CANCELLED,
        PaymentStatus.REFUNDED,
    ),
}


def is_legal_state(booking_status: BookingStatus, payment_status: PaymentStatus) -> bool:
    return (booking_status, payment_status) in LEGAL_STATES


def transition(
    *, booking_status: BookingStatus, payment_status: PaymentStatus, event: BookingEvent
) -> BookingState:
    try:
        return _TRANSITIONS[(booking_status, payment_status, event)]
    except KeyError:
        raise InvalidBookingStateError(
            f'Cannot apply {event} to a booking in state {booking_status}/{payment_status}'
        ) from None
