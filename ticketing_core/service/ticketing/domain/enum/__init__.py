"""Ticketing Domain Enums"""

from ticketing_core.service.ticketing.domain.enum.booking_status import BookingStatus, PaymentStatus
from ticketing_core.service.ticketing.domain.enum.payment_method import PaymentMethod

__all__ = ['BookingStatus', 'PaymentMethod', 'PaymentStatus']
