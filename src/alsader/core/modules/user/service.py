from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from alsader.core.core import Service
from alsader.core.modules.user.models import User, UserRole
from alsader.core.modules.user.validators import validate_password, validate_username
from alsader.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

ADMIN_USERNAME = "admin"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class UserService(Service):
    """Manages users with in-memory cache."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")
        self._users: dict[UUID, User] = {}

    def get_user(self, user_id: UUID) -> User:
        """Get user by ID from cache."""
        if user_id not in self._users:
            raise NotFoundError(f"User '{user_id}' not found")
        return self._users[user_id]

    def get_user_by_username(self, username: str) -> User:
        """Get user by username from cache."""
        user = next((u for u in self._users.values() if u.username == username), None)
        if user is None:
            raise NotFoundError(f"User '{username}' not found")
        return user

    def has_user(self, user_id: UUID) -> bool:
        return user_id in self._users

    def has_username(self, username: str) -> bool:
        return any(user.username == username for user in self._users.values())

    def get_all_users(self) -> list[User]:
        """Get all users from cache, oldest first."""
        return sorted(self._users.values(), key=lambda u: u.created_at)

    async def create_user(
        self, username: str, password: str, full_name: str = "", role: UserRole = UserRole.USER, *, check_password: bool = True
    ) -> User:
        """Create user with hashed password."""
        validate_username(username)
        if self.has_username(username):
            raise ValidationError(f"User '{username}' already exists")
        if check_password:
            validate_password(password)

        user = User(username=username, full_name=full_name, role=role, password_hash=hash_password(password))
        res = await self._collection.insert_one(user.to_mongo())
        logger.info("user_created", username=username, role=role)
        return await self.update_user_cache(res.inserted_id)

    def verify_password(self, username: str, password: str) -> bool:
        """Verify password against stored hash. Inactive users never verify."""
        user = next((u for u in self._users.values() if u.username == username), None)
        if user is None or not user.active:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8"))

    async def change_password(self, user_id: UUID, old_password: str, new_password: str) -> None:
        """Change user password after verifying current password."""
        user = self.get_user(user_id)
        if not bcrypt.checkpw(old_password.encode("utf-8"), user.password_hash.encode("utf-8")):
            raise ValidationError("Invalid current password")

        validate_password(new_password)
        await self._collection.update_one({"_id": user_id}, {"$set": {"password_hash": hash_password(new_password)}})
        await self.update_user_cache(user_id)

    async def update_user(self, user_id: UUID, full_name: str | None = None, active: bool | None = None) -> User:
        """Update profile fields; None values are left unchanged."""
        self.get_user(user_id)
        update: dict[str, Any] = {}
        if full_name is not None:
            update["full_name"] = full_name
        if active is not None:
            update["active"] = active
        if update:
            await self._collection.update_one({"_id": user_id}, {"$set": update})
        return await self.update_user_cache(user_id)

    async def delete_user(self, user_id: UUID) -> None:
        """Delete a user. Users who own documents are deactivated instead by the caller."""
        if not self.has_user(user_id):
            raise NotFoundError(f"User '{user_id}' not found")

        if await self.core.services.document.has_documents_by_user(user_id):
            raise ValidationError("Cannot delete user: owns documents, deactivate the account instead")

        await self._collection.delete_one({"_id": user_id})
        del self._users[user_id]
        logger.info("user_deleted", user_id=user_id)

    async def ensure_admin_user_exists(self) -> None:
        """Create default admin user if not exists."""
        if not self.has_username(ADMIN_USERNAME):
            await self.create_user(
                ADMIN_USERNAME, self.core.config.admin_password, "مدير النظام", UserRole.ADMIN, check_password=False
            )

    async def update_all_users_cache(self) -> None:
        """Reload all users cache from database."""
        users = await User.list_cursor(self._collection.find())
        self._users = {user.id: user for user in users}

    async def update_user_cache(self, user_id: UUID) -> User:
        """Reload a specific user cache from database."""
        user = await self._collection.find_one({"_id": user_id})
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        self._users[user_id] = User.model_validate(user)
        return self._users[user_id]

    async def on_start(self) -> None:
        """Initialize indexes, cache, and admin user."""
        await self._collection.create_index([("username", 1)], unique=True)
        await self.update_all_users_cache()
        await self.ensure_admin_user_exists()
        logger.debug("user_service_started", user_count=len(self._users))
