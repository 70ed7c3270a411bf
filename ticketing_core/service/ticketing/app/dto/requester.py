import attrs


@attrs.frozen
class Requester:
    """Caller identity supplied by the identity collaborator."""

    user_id: int
    is_admin: bool = False

    def can_access(self, owner_id: int) -> bool:
        return self.is_admin or self.user_id == owner_id
