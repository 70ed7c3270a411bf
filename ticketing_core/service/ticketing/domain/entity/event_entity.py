from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import attrs

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.domain.ticketing_errors import InvalidEventRequestError


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise ValueError(f'{attribute.name} cannot be empty')


def _to_money(value: object) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _validate_available(instance: 'TicketType', attribute: attrs.Attribute, value: int) -> None:
    if not 0 <= value <= instance.quantity:
        raise ValueError(
            f"Ticket type '{instance.name}' available {value} outside 0..{instance.quantity}"
        )


@attrs.define
class TicketType:
    name: str = attrs.field(validator=_validate_non_empty_string)
    price: Decimal = attrs.field(converter=_to_money)
    quantity: int
    available: int = attrs.field(validator=_validate_available)

    @property
    def sold(self) -> int:
        return self.quantity - self.available


@attrs.define
class Event:
    title: str = attrs.field(validator=_validate_non_empty_string)
    description: str
    ticket_types: List[TicketType] = attrs.field(factory=list)
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        title: str,
        description: str,
        ticket_types: List[TicketType],
    ) -> 'Event':
        if not title or not title.strip():
            raise InvalidEventRequestError('Event title cannot be empty')
        if not ticket_types:
            raise InvalidEventRequestError('An event needs at least one ticket type')

        names = [ticket_type.name for ticket_type in ticket_types]
        if len(set(names)) != len(names):
            raise InvalidEventRequestError('Ticket type names must be unique within an event')

        for ticket_type in ticket_types:
            if ticket_type.price < 0:
                raise InvalidEventRequestError(f"Ticket type '{ticket_type.name}' has a negative price")
            if ticket_type.quantity < 1:
                raise InvalidEventRequestError(
                    f"Ticket type '{ticket_type.name}' quantity must be positive"
                )

        return cls(
            title=title,
            description=description,
            # A fresh event starts with every ticket available
            ticket_types=[
                attrs.evolve(ticket_type, available=ticket_type.quantity)
                for ticket_type in ticket_types
            ],
            created_at=datetime.now(timezone.utc),
        )

    def find_ticket_type(self, name: str) -> Optional[TicketType]:
        return next((t for t in self.ticket_types if t.name == name), None)
