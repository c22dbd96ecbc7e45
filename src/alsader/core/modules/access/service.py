from uuid import UUID

from alsader.core.core import Service
from alsader.core.modules.access.rules import can_act_on
from alsader.core.modules.session.models import AuthToken
from alsader.core.modules.user.models import User
from alsader.errors import AccessDeniedError


class AccessService(Service):
    async def ensure_authenticated(self, auth_token: AuthToken) -> User:
        """Ensure the user is authenticated."""
        return await self.core.services.session.get_authenticated_user(auth_token)

    async def ensure_admin(self, auth_token: AuthToken) -> User:
        """Ensure the authenticated user is admin, raise AccessDeniedError if not."""
        user = await self.core.services.session.get_authenticated_user(auth_token)
        if not user.is_admin:
            raise AccessDeniedError("Admin privileges required")
        return user

    def ensure_owner_or_admin(self, user: User, owner_id: UUID, resource: str) -> None:
        """Raise AccessDeniedError unless the user owns the resource or is admin."""
        if not can_act_on(user, owner_id):
            raise AccessDeniedError(f"Access denied: {resource} belongs to another user")
