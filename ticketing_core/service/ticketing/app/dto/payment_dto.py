from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Optional
import uuid

import attrs

from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.enum.booking_status import (
    BookingStatus,
    PaymentStatus,
)


@attrs.frozen
class GatewayChargeOutcome:
    """Answer of the payment gateway for one charge. Transport problems are raised instead."""

    is_success: bool
    reference: Optional[str] = None
    reason_code: Optional[str] = None

    @classmethod
    def succeeded(cls, reference: str) -> 'GatewayChargeOutcome':
        return cls(is_success=True, reference=reference)

    @classmethod
    def failed(cls, reason_code: str) -> 'GatewayChargeOutcome':
        return cls(is_success=False, reason_code=reason_code)


@attrs.frozen
class PaymentIntent:
    intent_id: str
    client_secret: str
    amount: Decimal
    currency: str


class PaymentOutcome(StrEnum):
    COMPLETED = 'completed'
    FAILED = 'failed'
    ALREADY_PAID = 'already_paid'


@attrs.frozen
class PaymentResult:
    outcome: PaymentOutcome
    booking: Booking
    failure_reason: Optional[str] = None


class CallbackOutcome(StrEnum):
    APPLIED = 'applied'
    DUPLICATE = 'duplicate'
    IGNORED = 'ignored'


@attrs.frozen
class PaymentCallbackResult:
    outcome: CallbackOutcome
    booking: Booking


@attrs.frozen
class PaymentStatusView:
    booking_id: uuid.UUID
    booking_reference: str
    booking_status: BookingStatus
    payment_status: PaymentStatus
    payment_reference: Optional[str]
    amount: Decimal
    currency: str
    paid_at: Optional[datetime] = None
