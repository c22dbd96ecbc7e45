"""Ownership rules shared by document and reservation operations."""

from uuid import UUID

from alsader.core.modules.user.models import User


def can_act_on(user: User, owner_id: UUID) -> bool:
    """Admins act on everything, other users only on what they own."""
    return user.is_admin or user.id == owner_id


def owner_scope(user: User) -> UUID | None:
    """Owner filter for list queries: None (no restriction) for admins, the user's own id otherwise."""
    return None if user.is_admin else user.id
