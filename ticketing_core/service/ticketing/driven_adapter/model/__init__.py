"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from ticketing_core.service.ticketing.driven_adapter.model.booking_model import BookingLineItemModel, BookingModel
from ticketing_core.service.ticketing.driven_adapter.model.event_model import EventModel, TicketTypeModel

__all__ = [
    'BookingLineItemModel',
    'BookingModel',
    'EventModel',
    'TicketTypeModel',
]
