from typing import Any, Optional

import attrs


@attrs.frozen
class AttendeeInfo:
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional['AttendeeInfo']:
        if not data:
            return None
        return cls(name=data.get('name'), email=data.get('email'), phone=data.get('phone'))
