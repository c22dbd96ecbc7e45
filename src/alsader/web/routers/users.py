from fastapi import APIRouter
from pydantic import BaseModel, Field

from alsader.core.modules.user.models import UserRole, UserView
from alsader.web.deps import AppDep, AuthTokenDep
from alsader.web.openapi import ErrorResponse

router = APIRouter(tags=["users"])


class CreateUserRequest(BaseModel):
    """Request to create a new user."""

    username: str = Field(..., min_length=1, description="Username for the new user")
    password: str = Field(..., min_length=1, description="Password for the new user")
    full_name: str = Field("", description="Display name")
    role: UserRole = Field(UserRole.USER, description="Account role")


class UpdateUserRequest(BaseModel):
    """Partial update of a user account."""

    full_name: str | None = Field(None, description="New display name")
    active: bool | None = Field(None, description="Enable or disable the account")


@router.get(
    "/users",
    summary="List all users",
    description="Get all users in the system. Only accessible by admin users.",
    operation_id="listUsers",
    responses={
        200: {"description": "List of all users"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def list_users(app: AppDep, auth_token: AuthTokenDep) -> list[UserView]:
    return await app.get_all_users(auth_token)


@router.post(
    "/users",
    summary="Create new user",
    description="Create a new user account. Only accessible by admin users.",
    operation_id="createUser",
    status_code=201,
    responses={
        201: {"description": "User created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid username or weak password"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def create_user(create_data: CreateUserRequest, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.create_user(
        auth_token, create_data.username, create_data.password, create_data.full_name, create_data.role
    )


@router.patch(
    "/users/{username}",
    summary="Update user",
    description="Rename or enable/disable a user account. Disabling ends all of the user's sessions.",
    operation_id="updateUser",
    responses={
        200: {"description": "User updated successfully"},
        400: {"model": ErrorResponse, "description": "Cannot deactivate yourself"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def update_user(username: str, update_data: UpdateUserRequest, app: AppDep, auth_token: AuthTokenDep) -> UserView:
    return await app.update_user(auth_token, username, update_data.full_name, update_data.active)


@router.delete(
    "/users/{username}",
    summary="Delete user",
    description="Delete a user account. Users who registered documents can only be disabled.",
    operation_id="deleteUser",
    status_code=204,
    responses={
        204: {"description": "User deleted successfully"},
        400: {"model": ErrorResponse, "description": "Cannot delete user (owns documents or self-deletion)"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def delete_user(username: str, app: AppDep, auth_token: AuthTokenDep) -> None:
    await app.delete_user(auth_token, username)
