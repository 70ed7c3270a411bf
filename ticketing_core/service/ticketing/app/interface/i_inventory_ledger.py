from abc import ABC, abstractmethod
from typing import List

from ticketing_core.service.ticketing.domain.value_object.ticket_line import (
    LineItem,
    TicketRequestLine,
)


class IInventoryLedger(ABC):
    """
    Single source of truth for ticket capacity

    Implementations must make `try_reserve` linearizable per event and keep
    `0 <= available <= quantity` for every ticket type.
    """

    @abstractmethod
    async def try_reserve(
        self, *, event_id: int, lines: List[TicketRequestLine]
    ) -> List[LineItem]:
        """
        Reserve every line or none of them.

        Returns:
            The reserved lines with the unit price captured at reservation time

        Raises:
            EventNotFoundError: Unknown event
            UnknownTicketTypeError: First line (request order) naming a missing ticket type
            InsufficientStockError: First line (request order) asking for more than available
        """
        pass

    @abstractmethod
    async def release(self, *, event_id: int, lines: List[TicketRequestLine]) -> None:
        """
        Give reserved tickets back, clamped at each ticket type's capacity.

        Raises:
            LedgerInvariantError: A released ticket type no longer exists
        """
        pass
