"""
HTTP payment gateway (httpx)

Speaks a Stripe-style `payment_intents` API:
- POST /v1/payment_intents with form data, `Authorization: Bearer <api key>` and an
  `Idempotency-Key` header
- 2xx with `status == succeeded` is a success; any other status is a decline
- 402 is a decline carrying `error.decline_code` or `error.code`
- 5xx, 409 (same idempotency key still in flight), 429, transport errors and malformed success
  bodies are unavailability, so the caller keeps the key and retries
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Optional

import httpx

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


# Transient refusals: the request may still be in flight or was not processed yet
_RETRYABLE_STATUS_CODES = frozenset({409, 429})


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class HttpPaymentGateway(IPaymentGateway):
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.PAYMENT_GATEWAY_BASE_URL).rstrip('/')
        self.api_key = api_key or settings.PAYMENT_GATEWAY_API_KEY.get_secret_value()
        self.webhook_secret = (
            webhook_secret or settings.PAYMENT_WEBHOOK_SECRET.get_secret_value()
        )
        self.timeout_seconds = timeout_seconds or settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self._transport,
            headers={'Authorization': f'Bearer {self.api_key}'},
        )

    async def _post_payment_intent(
        self, *, data: dict[str, Any], idempotency_key: str
    ) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.post(
                    '/v1/payment_intents',
                    data=data,
                    headers={'Idempotency-Key': idempotency_key},
                )
        except httpx.TransportError as e:
            raise PaymentGatewayUnavailableError(
                f'Payment gateway unreachable: {type(e).__name__}'
            ) from e

        if response.status_code >= 500 or response.status_code in _RETRYABLE_STATUS_CODES:
            raise PaymentGatewayUnavailableError(
                f'Payment gateway error: HTTP {response.status_code}'
            )
        return response

    @staticmethod
    def _metadata_fields(metadata: Mapping[str, str]) -> dict[str, str]:
        return {f'metadata[{key}]': value for key, value in metadata.items()}

    @staticmethod
    def _success_body(response: httpx.Response, *required: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise PaymentGatewayUnavailableError(
                f'Payment gateway sent an unreadable body: HTTP {response.status_code}'
            ) from e
        if not isinstance(body, dict):
            body = {}
        missing = [field for field in required if not body.get(field)]
        if missing:
            raise PaymentGatewayUnavailableError(
                f'Payment gateway response is missing {", ".join(missing)}'
            )
        return body

    @staticmethod
    def _decline_reason(response: httpx.Response) -> str:
        try:
            error = response.json().get('error') or {}
        except ValueError:
            error = {}
        return error.get('decline_code') or error.get('code') or f'http_{response.status_code}'

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
        response = await self._post_payment_intent(
            data={
                'amount': to_minor_units(amount),
                'currency': currency,
                'payment_method': payment_method_token,
                'confirm': 'true',
                **self._metadata_fields(metadata),
            },
            idempotency_key=idempotency_key,
        )

        if response.is_success:
            body = self._success_body(response, 'id')
            if body.get('status') == 'succeeded':
                return GatewayChargeOutcome.succeeded(body['id'])
            return GatewayChargeOutcome.failed(f'status_{body.get("status", "unknown")}')

        if response.status_code != 402:
            Logger.base.error(
                f'❌ [PAY_GATEWAY] Unexpected HTTP {response.status_code} for {idempotency_key}'
            )
        return GatewayChargeOutcome.failed(self._decline_reason(response))

    @Logger.io
    async def create_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        idempotency_key: str,
        metadata: Mapping[str, str],
    ) -> PaymentIntent:
        response = await self._post_payment_intent(
            data={
                'amount': to_minor_units(amount),
                'currency': currency,
                'automatic_payment_methods[enabled]': 'true',
                **self._metadata_fields(metadata),
            },
            idempotency_key=idempotency_key,
        )
        if not response.is_success:
            raise PaymentGatewayUnavailableError(
                f'Payment gateway refused intent: {self._decline_reason(response)}'
            )

        body = self._success_body(response, 'id', 'client_secret')
        return PaymentIntent(
            intent_id=body['id'],
            client_secret=body['client_secret'],
            amount=amount,
            currency=currency,
        )

    def verify_webhook_signature(self, *, payload: bytes, signature: str | None) -> bool:
        return signature_matches(secret=self.webhook_secret, payload=payload, signature=signature)
