"""Ticketing Domain Value Objects"""

from ticketing_core.service.ticketing.domain.value_object.attendee_info import AttendeeInfo
from ticketing_core.service.ticketing.domain.value_object.ticket_line import LineItem, TicketRequestLine

__all__ = ['AttendeeInfo', 'LineItem', 'TicketRequestLine']
