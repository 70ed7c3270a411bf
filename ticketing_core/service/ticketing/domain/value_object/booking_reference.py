import secrets

from ticketing_core.platform.config.core_setting import settings


_REFERENCE_MIN = 1_000_000
_REFERENCE_SPAN = 9_000_000  # 7 digits: 1000000..9999999


def generate_booking_reference(prefix: str | None = None) -> str:
    """Human-readable reference such as `BK-4821937`. Uniqueness is enforced by storage."""
    number = _REFERENCE_MIN + secrets.randbelow(_REFERENCE_SPAN)
    return f'{prefix if prefix is not None else settings.BOOKING_REFERENCE_PREFIX}{number}'
