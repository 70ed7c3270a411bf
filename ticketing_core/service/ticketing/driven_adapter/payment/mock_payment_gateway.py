"""
Mock payment gateway

Local stand-in for the payment processor. Every charge succeeds with a `pi_mock_...`
reference unless the payment method token is one of the configured decline tokens. Answers are
remembered per idempotency key, as a real processor does. The charge is decided before the
simulated latency, so a caller that times out may still have been charged.
"""

from decimal import Decimal
from typing import Dict, List, Mapping, Optional
import uuid

import anyio

from ticketing_core.platform.config.core_setting import settings
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.dto.payment_dto import GatewayChargeOutcome, PaymentIntent
from ticketing_core.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    PaymentGatewayUnavailableError,
)
from ticketing_core.service.ticketing.driven_adapter.payment.webhook_signature import (
    signature_matches,
)


# Simulates an outage without touching the network
UNAVAILABLE_TOKEN = 'tok_gatewayUnavailable'

_DECLINE_REASONS = {
    'tok_chargeDeclinedInsufficientFunds': 'insufficient_funds',
    'tok_chargeDeclinedExpiredCard': 'expired_card',
}


class MockPaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        decline_tokens: Optional[List[str]] = None,
        latency_seconds: Optional[float] = None,
        webhook_secret: Optional[str] = None,
    ) -> None:
        self.decline_tokens = set(
            decline_tokens if decline_tokens is not None else settings.MOCK_PAYMENT_DECLINE_TOKENS
        )
        self.latency_seconds = (
            latency_seconds
            if latency_seconds is not None
            else settings.MOCK_PAYMENT_LATENCY_SECONDS
        )
        self.webhook_secret = (
            webhook_secret
            if webhook_secret is not None
            else settings.PAYMENT_WEBHOOK_SECRET.get_secret_value()
        )
        self._charges: Dict[str, GatewayChargeOutcome] = {}
        self._intents: Dict[str, PaymentIntent] = {}
        self.charge_calls = 0

    async def _simulate_latency(self) -> None:
        if self.latency_seconds:
            await anyio.sleep(self.latency_seconds)

    @staticmethod
    def _new_reference() -> str:
        return f'pi_mock_{uuid.uuid4().hex[:24]}'

    @Logger.io
    async def charge(
        self,
        *,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
        payment_method_token: str,
        metadata: Mapping[str, str],
    ) -> GatewayChargeOutcome:
        self.charge_calls += 1
        if payment_method_token == UNAVAILABLE_TOKEN:
            raise PaymentGatewayUnavailableError('Mock payment gateway is unavailable')

        if (previous := self._charges.get(idempotency_key)) is not None:
            Logger.base.info(f'🔁 [MOCK_PAY] Replaying answer for {idempotency_key}')
            await self._simulate_latency()
            return previous

        if payment_method_token in self.decline_tokens:
            outcome = GatewayChargeOutcome.failed(
                _DECLINE_REASONS.get(payment_method_token, 'card_declined')
            )
        else:
            outcome = GatewayChargeOutcome.succeeded(self._new_reference())

        self._charges[idempotency_key] = outcome
        Logger.base.info(
            f'💳 [MOCK_PAY] {amount} {currency} key={idempotency_key} '
            f'-> {"succeeded " + str(outcome.reference) if outcome.is_success else outcome.reason_code}'
        )
        await self._simulate_latency()
        return outcome

    @Logger.io
    async def create_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        if (previous := self._intents.get(idempotency_key)) is not None:
            return previous

        intent_id = self._new_reference()
        intent = PaymentIntent(
            intent_id=intent_id,
            client_secret=f'{intent_id}_secret_{uuid.uuid4().hex[:12]}',
            amount=amount,
            currency=currency,
        )
        self._intents[idempotency_key] = intent
        return intent

    def verify_webhook_signature(self, *, payload: bytes, signature: str | None) -> bool:
        return signature_matches(secret=self.webhook_secret, payload=payload, signature=signature)
