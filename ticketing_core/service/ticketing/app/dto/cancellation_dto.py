import attrs

from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking


@attrs.frozen
class CancellationResult:
    booking: Booking
    already_cancelled: bool = False
