from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Mapping

from ticketing_core.service.ticketing.app.dto.payment_dto import GatewayChargeOutcome, PaymentIntent


class IPaymentGateway(ABC):
    """
    Integration contract with the external payment processor

    A decline is a normal answer (`GatewayChargeOutcome.failed`). Timeouts and transport
    problems raise `PaymentGatewayUnavailableError` and must never be read as success.
    """

    @abstractmethod
    async def charge(
        self,
        *,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
        payment_method_token: str,
        metadata: Mapping[str, str],
    ) -> GatewayChargeOutcome:
        pass

    @abstractmethod
    async def create_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        pass

    @abstractmethod
    def verify_webhook_signature(self, *, payload: bytes, signature: str | None) -> bool:
        pass
