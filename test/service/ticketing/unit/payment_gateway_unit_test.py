"""
Unit tests for the payment gateway adapters

MockPaymentGateway is exercised directly; HttpPaymentGateway runs against httpx.MockTransport so
the request shape and the response mapping are checked without a network.
"""

from decimal import Decimal
import json
from urllib.parse import parse_qs

import httpx
import pytest

from ticketing_core.service.ticketing.domain.ticketing_errors import (
    PaymentGatewayUnavailableError,
)
from ticketing_core.service.ticketing.driven_adapter.payment.http_payment_gateway import (
    HttpPaymentGateway,
    to_minor_units,
)
from ticketing_core.service.ticketing.driven_adapter.payment.mock_payment_gateway import (
    UNAVAILABLE_TOKEN,
    MockPaymentGateway,
)
from ticketing_core.service.ticketing.driven_adapter.payment.webhook_signature import (
    compute_signature,
)


CHARGE = {
    'amount': Decimal('100.00'),
    'currency': 'usd',
    'metadata': {'booking_id': 'b-1', 'booking_reference': 'BK-1234567'},
}


def _server_error(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text='upstream down')


def _connection_refused(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError('refused', request=request)


def _idempotency_key_in_flight(request: httpx.Request) -> httpx.Response:
    return httpx.Response(409, json={'error': {'code': 'idempotency_error'}})


def _rate_limited(request: httpx.Request) -> httpx.Response:
    return httpx.Response(429, json={'error': {'code': 'rate_limit'}})


def _success_without_json(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text='<html>ok</html>')


def _success_without_id(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={'status': 'succeeded'})


def _gateway(handler) -> HttpPaymentGateway:
    return HttpPaymentGateway(
        base_url='https://gateway.test',
        api_key='sk_test_key',
        webhook_secret='whsec_test',
        timeout_seconds=2,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestMockPaymentGateway:
    @pytest.mark.asyncio
    async def test_success_and_replay_per_idempotency_key(
        self, gateway: MockPaymentGateway
    ) -> None:
        first = await gateway.charge(
            **CHARGE, idempotency_key='booking-1-attempt-1', payment_method_token='tok_visa'
        )
        replay = await gateway.charge(
            **CHARGE, idempotency_key='booking-1-attempt-1', payment_method_token='tok_visa'
        )

        assert first.is_success
        assert first.reference.startswith('pi_mock_')
        assert replay == first

    @pytest.mark.asyncio
    async def test_decline_tokens(self, gateway: MockPaymentGateway) -> None:
        outcome = await gateway.charge(
            **CHARGE, idempotency_key='k', payment_method_token='tok_chargeDeclined'
        )

        assert not outcome.is_success
        assert outcome.reason_code == 'card_declined'

    @pytest.mark.asyncio
    async def test_unavailable_token(self, gateway: MockPaymentGateway) -> None:
        with pytest.raises(PaymentGatewayUnavailableError):
            await gateway.charge(
                **CHARGE, idempotency_key='k', payment_method_token=UNAVAILABLE_TOKEN
            )


@pytest.mark.unit
class TestHttpPaymentGateway:
    def test_minor_units(self) -> None:
        assert to_minor_units(Decimal('100.00')) == 10000
        assert to_minor_units(Decimal('0.015')) == 2

    @pytest.mark.asyncio
    async def test_successful_charge_request_shape(self) -> None:
        # Arrange
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={'id': 'pi_123', 'status': 'succeeded'})

        # Act
        outcome = await _gateway(handler).charge(
            **CHARGE, idempotency_key='booking-1-attempt-1', payment_method_token='pm_card'
        )

        # Assert
        assert outcome.is_success
        assert outcome.reference == 'pi_123'
        request = captured[0]
        assert request.url == 'https://gateway.test/v1/payment_intents'
        assert request.headers['Authorization'] == 'Bearer sk_test_key'
        assert request.headers['Idempotency-Key'] == 'booking-1-attempt-1'
        form = parse_qs(request.content.decode())
        assert form['amount'] == ['10000']
        assert form['payment_method'] == ['pm_card']
        assert form['metadata[booking_reference]'] == ['BK-1234567']

    @pytest.mark.asyncio
    async def test_card_error_is_a_decline(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                402, json={'error': {'code': 'card_declined', 'decline_code': 'expired_card'}}
            )

        outcome = await _gateway(handler).charge(
            **CHARGE, idempotency_key='k', payment_method_token='pm'
        )

        assert not outcome.is_success
        assert outcome.reason_code == 'expired_card'

    @pytest.mark.asyncio
    async def test_requires_action_is_not_a_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={'id': 'pi_1', 'status': 'requires_action'})

        outcome = await _gateway(handler).charge(
            **CHARGE, idempotency_key='k', payment_method_token='pm'
        )

        assert outcome.reason_code == 'status_requires_action'

    @pytest.mark.asyncio
    @pytest.mark.parametrize('handler', [_server_error, _connection_refused])
    async def test_server_error_or_transport_failure_is_unavailable(self, handler) -> None:
        with pytest.raises(PaymentGatewayUnavailableError):
            await _gateway(handler).charge(
                **CHARGE, idempotency_key='k', payment_method_token='pm'
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize('handler', [_idempotency_key_in_flight, _rate_limited])
    async def test_in_flight_or_rate_limited_is_unavailable_not_a_decline(self, handler) -> None:
        with pytest.raises(PaymentGatewayUnavailableError, match='HTTP 4'):
            await _gateway(handler).charge(
                **CHARGE, idempotency_key='k', payment_method_token='pm'
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize('handler', [_success_without_json, _success_without_id])
    async def test_malformed_success_body_is_unavailable(self, handler) -> None:
        with pytest.raises(PaymentGatewayUnavailableError):
            await _gateway(handler).charge(
                **CHARGE, idempotency_key='k', payment_method_token='pm'
            )

    @pytest.mark.asyncio
    async def test_create_intent(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={'id': 'pi_9', 'client_secret': 'pi_9_secret_abc', 'status': 'new'}
            )

        intent = await _gateway(handler).create_intent(
            amount=Decimal('20.00'), currency='usd', idempotency_key='k', metadata={}
        )

        assert intent.intent_id == 'pi_9'
        assert intent.client_secret == 'pi_9_secret_abc'
        assert intent.amount == Decimal('20.00')

    def test_webhook_signature(self) -> None:
        gateway = _gateway(lambda request: httpx.Response(200))
        payload = json.dumps({'booking_id': 'b-1'}).encode()

        assert gateway.verify_webhook_signature(
            payload=payload, signature=compute_signature(secret='whsec_test', payload=payload)
        )
        assert not gateway.verify_webhook_signature(payload=payload, signature='00')
