from decimal import Decimal

import pytest

from ticketing_core.service.ticketing.domain.entity.event_entity import Event, TicketType
from ticketing_core.service.ticketing.domain.ticketing_errors import InvalidEventRequestError
from ticketing_core.service.ticketing.domain.value_object.booking_reference import (
    generate_booking_reference,
)


def _ticket_type(name: str = 'General', price: str = '50.00', quantity: int = 10) -> TicketType:
    return TicketType(name=name, price=Decimal(price), quantity=quantity, available=quantity)


@pytest.mark.unit
class TestEventCreate:
    def test_every_ticket_starts_available(self) -> None:
        # Arrange
        partially_sold = TicketType(name='General', price=Decimal('50'), quantity=10, available=3)

        # Act
        event = Event.create(title='Gig', description='', ticket_types=[partially_sold])

        # Assert
        assert event.ticket_types[0].available == 10
        assert event.ticket_types[0].sold == 0
        assert event.created_at is not None

    def test_duplicate_ticket_type_names_rejected(self) -> None:
        with pytest.raises(InvalidEventRequestError, match='unique'):
            Event.create(
                title='Gig', description='', ticket_types=[_ticket_type(), _ticket_type()]
            )

    def test_event_needs_a_ticket_type(self) -> None:
        with pytest.raises(InvalidEventRequestError):
            Event.create(title='Gig', description='', ticket_types=[])

    def test_negative_price_rejected(self) -> None:
        with pytest.raises(InvalidEventRequestError, match='negative price'):
            Event.create(title='Gig', description='', ticket_types=[_ticket_type(price='-1')])

    def test_available_cannot_exceed_quantity(self) -> None:
        with pytest.raises(ValueError):
            TicketType(name='General', price=Decimal('1'), quantity=2, available=3)

    def test_price_is_converted_to_decimal(self) -> None:
        assert TicketType(name='General', price='12.50', quantity=1, available=1).price == Decimal(
            '12.50'
        )

    def test_find_ticket_type(self) -> None:
        event = Event.create(
            title='Gig', description='', ticket_types=[_ticket_type('General'), _ticket_type('VIP')]
        )
        assert event.find_ticket_type('VIP') is not None
        assert event.find_ticket_type('Balcony') is None


@pytest.mark.unit
class TestBookingReference:
    def test_format(self) -> None:
        reference = generate_booking_reference()
        assert reference.startswith('BK-')
        digits = reference.removeprefix('BK-')
        assert len(digits) == 7 and digits.isdigit()
        assert 1_000_000 <= int(digits) <= 9_999_999

    def test_custom_prefix(self) -> None:
        assert generate_booking_reference(prefix='TK').startswith('TK')
