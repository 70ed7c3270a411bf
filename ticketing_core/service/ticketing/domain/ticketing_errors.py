"""
Typed failures of the ticketing core

Each class carries the HTTP status the driving adapter answers with, so the FastAPI handler
for CustomBaseError maps them without a lookup table.
"""

from ticketing_core.platform.exception.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    InvariantViolationError,
    NotFoundError,
    ServiceUnavailableError,
)


# ========== Validation ==========


class InvalidBookingRequestError(DomainError):
    pass


class InvalidEventRequestError(DomainError):
    pass


class UnknownTicketTypeError(DomainError):
    def __init__(self, ticket_type_name: str) -> None:
        self.ticket_type_name = ticket_type_name
        super().__init__(f"Unknown ticket type '{ticket_type_name}'")


# ========== Not found ==========


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int) -> None:
        self.event_id = event_id
        super().__init__(f'Event {event_id} not found')


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: object) -> None:
        self.booking_id = booking_id
        super().__init__(f'Booking {booking_id} not found')


# ========== Conflicts ==========


class InsufficientStockError(ConflictError):
    def __init__(self, ticket_type_name: str, requested: int, available: int) -> None:
        self.ticket_type_name = ticket_type_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough '{ticket_type_name}' tickets: requested {requested}, available {available}"
        )


class InvalidBookingStateError(ConflictError):
    pass


class ConcurrentBookingUpdateError(ConflictError):
    def __init__(self, booking_id: object) -> None:
        self.booking_id = booking_id
        super().__init__(f'Booking {booking_id} was modified concurrently, retry the request')


class BookingReferenceConflictError(ConflictError):
    """Raised by storage when a generated booking reference is already taken."""

    def __init__(self, booking_reference: str) -> None:
        self.booking_reference = booking_reference
        super().__init__(f'Booking reference {booking_reference} already exists')


# ========== Temporarily unavailable ==========


class PaymentGatewayUnavailableError(ServiceUnavailableError):
    pass


class BookingReferenceExhaustedError(ServiceUnavailableError):
    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f'Could not allocate a unique booking reference after {attempts} attempts')


# ========== Webhook ==========


class InvalidWebhookSignatureError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__('Invalid payment webhook signature')


# ========== Invariant violations ==========


class LedgerInvariantError(InvariantViolationError):
    pass
