from abc import ABC, abstractmethod

from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking


class IBookingCommandRepo(ABC):
    """Repository interface for booking write operations"""

    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        """
        Raises:
            BookingReferenceConflictError: booking_reference already taken
        """
        pass

    @abstractmethod
    async def update(self, *, booking: Booking) -> Booking:
        """
        Persist a transitioned booking if nobody wrote it since it was read.

        `booking.version` is the version that was read; the stored copy gets version + 1.

        Raises:
            ConcurrentBookingUpdateError: stored version differs
        """
        pass
