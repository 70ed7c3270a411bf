from decimal import Decimal

import attrs


@attrs.frozen
class TicketRequestLine:
    """What the buyer asked for: a ticket type by name and how many."""

    ticket_type_name: str
    quantity: int


@attrs.frozen
class LineItem:
    """A reserved line with the unit price the ledger held at reservation time."""

    ticket_type_name: str
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def as_request_line(self) -> TicketRequestLine:
        return TicketRequestLine(ticket_type_name=self.ticket_type_name, quantity=self.quantity)
