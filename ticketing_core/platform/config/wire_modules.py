"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from ticketing_core.service.ticketing.app.command import (
    cancel_booking_use_case,
    create_booking_use_case,
    create_event_use_case,
    create_payment_intent_use_case,
    handle_payment_callback_use_case,
    process_payment_use_case,
)
from ticketing_core.service.ticketing.app.query import (
    get_booking_use_case,
    get_event_use_case,
    get_payment_status_use_case,
    list_bookings_use_case,
)


WIRE_MODULES: list[ModuleType] = [
    create_booking_use_case,
    process_payment_use_case,
    handle_payment_callback_use_case,
    create_payment_intent_use_case,
    cancel_booking_use_case,
    create_event_use_case,
    get_booking_use_case,
    list_bookings_use_case,
    get_event_use_case,
    get_payment_status_use_case,
]
