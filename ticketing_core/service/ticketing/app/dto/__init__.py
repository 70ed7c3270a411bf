"""Application layer DTOs"""

from ticketing_core.service.ticketing.app.dto.cancellation_dto import CancellationResult
from ticketing_core.service.ticketing.app.dto.payment_dto import (
    CallbackOutcome,
    GatewayChargeOutcome,
    PaymentCallbackResult,
    PaymentIntent,
    PaymentOutcome,
    PaymentResult,
    PaymentStatusView,
)
from ticketing_core.service.ticketing.app.dto.requester import Requester

__all__ = [
    'CallbackOutcome',
    'CancellationResult',
    'GatewayChargeOutcome',
    'PaymentCallbackResult',
    'PaymentIntent',
    'PaymentOutcome',
    'PaymentResult',
    'PaymentStatusView',
    'Requester',
]
