from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations"""

    @abstractmethod
    async def get_by_id(self, *, booking_id: uuid.UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        """Newest first"""
        pass

    @abstractmethod
    async def list_all(self) -> List[Booking]:
        """Newest first"""
        pass
