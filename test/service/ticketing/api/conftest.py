from collections.abc import Iterator

from fastapi.testclient import TestClient
import pytest

from ticketing_core.main import app


ADMIN_HEADERS = {'X-User-Id': '1', 'X-User-Role': 'admin'}
BUYER_HEADERS = {'X-User-Id': '7'}


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Runs the lifespan (DI wiring) against the memory backend and the mock gateway."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def event_id(client: TestClient) -> int:
    """General: 100 @ 50.00, VIP: 1 @ 200.00"""
    response = client.post(
        '/api/event',
        json={
            'title': 'Spring Concert',
            'description': 'Open air',
            'ticket_types': [
                {'name': 'General', 'price': '50.00', 'quantity': 100},
                {'name': 'VIP', 'price': '200.00', 'quantity': 1},
            ],
        },
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201, response.text
    return response.json()['id']


@pytest.fixture
def booking_id(client: TestClient, event_id: int) -> str:
    response = client.post(
        '/api/booking',
        json={'event_id': event_id, 'tickets': [{'ticket_type': 'General', 'quantity': 2}]},
        headers=BUYER_HEADERS,
    )
    assert response.status_code == 201, response.text
    return response.json()['id']
