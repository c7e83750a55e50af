"""
Authorization checks shared by every service operation.

Routes never compare roles themselves; they pass the
authenticated Actor down and the service calls one of
these functions.
"""

from dataclasses import dataclass

from course_marketplace.exceptions import ForbiddenError
from course_marketplace.models.enums import UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as supplied by the identity provider."""
    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def authorize(actor: Actor, *roles: UserRole) -> None:
    """Raise ForbiddenError unless the actor holds one of the roles."""
    if actor.role not in roles:
        allowed = ", ".join(role.value for role in roles)
        raise ForbiddenError(
            f"Access denied. Only {allowed} can perform this action."
        )


def authorize_owner(actor: Actor, owner_id: int) -> None:
    """Allow the resource owner and administrators."""
    if actor.is_admin or actor.user_id == owner_id:
        return
    raise ForbiddenError("Access denied. This enrollment belongs to another user.")
