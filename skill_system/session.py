from pydantic import BaseModel

from .errors import PermissionDeniedError
from .models import UserRole


class SessionContext(BaseModel):
    """Who is calling. Passed explicitly into every mutating operation."""

    user_id: str
    role: UserRole = UserRole.MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def require_admin(context: SessionContext, action: str = "manage skills"):
    if not context.is_admin:
        raise PermissionDeniedError(
            f"Only admins can {action}. Your role: {context.role.value}"
        )


def require_owner(context: SessionContext, user_id: str):
    if context.user_id != user_id:
        raise PermissionDeniedError("You can only change your own achievements.")
