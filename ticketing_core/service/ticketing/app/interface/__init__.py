"""Application layer interfaces (Ports)"""

from ticketing_core.service.ticketing.app.interface.i_booking_command_repo import IBookingCommandRepo
from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from ticketing_core.service.ticketing.app.interface.i_event_command_repo import IEventCommandRepo
from ticketing_core.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from ticketing_core.service.ticketing.app.interface.i_inventory_ledger import IInventoryLedger
from ticketing_core.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway

__all__ = [
    'IBookingCommandRepo',
    'IBookingQueryRepo',
    'IEventCommandRepo',
    'IEventQueryRepo',
    'IInventoryLedger',
    'IPaymentGateway',
]
