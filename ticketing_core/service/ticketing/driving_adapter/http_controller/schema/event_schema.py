from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ticketing_core.service.ticketing.domain.entity.event_entity import Event


class TicketTypeCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=1)


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ''
    ticket_types: List[TicketTypeCreateRequest] = Field(min_length=1)

    model_config = {
        'json_schema_extra': {
            'example': {
                'title': 'Spring Concert',
                'description': 'Open air, gates at 18:00',
                'ticket_types': [
                    {'name': 'General', 'price': '50.00', 'quantity': 100},
                    {'name': 'VIP', 'price': '150.00', 'quantity': 10},
                ],
            }
        },
    }


class TicketTypeResponse(BaseModel):
    name: str
    price: Decimal
    quantity: int
    available: int


class EventResponse(BaseModel):
    id: int
    title: str
    description: str
    ticket_types: List[TicketTypeResponse]
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, event: Event) -> 'EventResponse':
        return cls(
            id=event.id or 0,
            title=event.title,
            description=event.description,
            ticket_types=[
                TicketTypeResponse(
                    name=t.name, price=t.price, quantity=t.quantity, available=t.available
                )
                for t in event.ticket_types
            ],
            created_at=event.created_at,
        )
