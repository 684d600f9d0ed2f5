"""Request context passed explicitly into every core operation."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the caller's identity.

    Resolved from the session at the API boundary; repositories and the
    generation service never look up the current user on their own.
    """

    user_id: UUID
    is_admin: bool = False
