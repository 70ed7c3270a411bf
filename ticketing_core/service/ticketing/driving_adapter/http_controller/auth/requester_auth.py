"""
Caller identity from the upstream identity proxy

The proxy authenticates the user and forwards trusted headers:
- X-User-Id:   numeric user id
- X-User-Role: `admin` for administrators, anything else (or absent) for regular users
"""

from typing import Optional

from fastapi import Header
from opentelemetry import trace

from ticketing_core.platform.exception.exceptions import AuthenticationError, ForbiddenError
from ticketing_core.service.ticketing.app.dto.requester import Requester


ADMIN_ROLE = 'admin'


async def get_requester(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Requester:
    if not x_user_id:
        raise AuthenticationError('Missing X-User-Id header')
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise AuthenticationError('X-User-Id must be an integer') from None

    return Requester(
        user_id=user_id,
        is_admin=(x_user_role or '').strip().lower() == ADMIN_ROLE,
    )


async def require_admin(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Requester:
    requester = await get_requester(x_user_id=x_user_id, x_user_role=x_user_role)
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_admin',
        attributes={'user.id': requester.user_id, 'user.is_admin': requester.is_admin},
    ):
        if not requester.is_admin:
            raise ForbiddenError('Only admins can perform this action')
        return requester
