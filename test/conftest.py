"""
Test Configuration and Fixtures

- Environment is set before any application import (settings are read at import time)
- Unit tests run against the in-memory store and the mock payment gateway
- Integration tests use a throwaway SQLite database through aiosqlite
- API tests drive the FastAPI app through TestClient with the memory backend
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    os.environ['STORAGE_BACKEND'] = 'memory'
    os.environ['PAYMENT_GATEWAY'] = 'mock'
    os.environ['PAYMENT_WEBHOOK_SECRET'] = 'whsec_test'
    os.environ['PAYMENT_CURRENCY'] = 'usd'
    os.environ['MOCK_PAYMENT_DECLINE_TOKENS'] = (
        'tok_chargeDeclined,tok_chargeDeclinedInsufficientFunds'
    )
    os.environ['MOCK_PAYMENT_LATENCY_SECONDS'] = '0'
    os.environ['BOOKING_REFERENCE_MAX_ATTEMPTS'] = '5'
    os.environ['DEBUG'] = 'false'
    os.environ['LOG_TO_FILE'] = 'false'

    test_log_dir = Path(__file__).parent / 'test_log'
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402

from ticketing_core.platform.config.di import container  # noqa: E402


@pytest.fixture(autouse=True)
def reset_container_singletons() -> Generator[None, None, None]:
    """Each test starts with a fresh in-memory store, gateway and locks."""
    container.reset_singletons()
    yield
    container.reset_singletons()
