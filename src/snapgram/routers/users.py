"""User management API endpoints.

This module provides RESTful API endpoints for managing user accounts:

- Listing users and searching usernames by regular expression
- Registration with hashed passwords and unique usernames
- Partial profile updates
- Follow / unfollow toggling between two users
- Account deletion

Authentication:
    Listing, searching, updating and deleting require
    ``Authorization: Bearer <access token>``. Registration is public. The
    follow toggle identifies the acting user from the refresh cookie.

Example Usage:
    Register:
        POST /users
        {"username": "alice", "password": "secret", "name": "Alice"}

    Search:
        GET /users/^ali

    Toggle follow:
        PATCH /users/6650f0c2a1b2c3d4e5f60718
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path, status

from ..core.dependencies import get_user_service, refresh_identity, require_identity
from ..core.logging import ContextLogger
from ..core.security import TokenClaim
from ..schemas.common import IdRequest, MessageResponse
from ..schemas.users import UserCreate, UserResponse, UserUpdate
from ..services.users import UserService

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={
        400: {"description": "Missing fields or user not found"},
        401: {"description": "Missing or malformed credentials"},
        403: {"description": "Token invalid or expired"},
    },
)

logger = ContextLogger(__name__)

Service = Annotated[UserService, Depends(get_user_service)]


@router.get(
    "",
    response_model=list[UserResponse],
    dependencies=[Depends(require_identity)],
    summary="List users",
)
async def get_all_users(service: Service) -> list[dict]:
    return await service.list_users()


@router.get(
    "/{query}",
    response_model=list[UserResponse],
    dependencies=[Depends(require_identity)],
    summary="Search users",
    description="Case-insensitive regular expression match on usernames",
)
async def search_users(
    service: Service,
    query: str = Path(..., description="Regular expression matched against usernames"),
) -> list[dict]:
    return await service.search_users(query)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Duplicate username"}},
    summary="Register a user",
)
async def create_user(body: UserCreate, service: Service) -> MessageResponse:
    username = await service.create_user(body.username, body.password, body.name)
    return MessageResponse(message=f"New user {username} created!")


@router.patch(
    "",
    response_model=MessageResponse,
    dependencies=[Depends(require_identity)],
    responses={409: {"description": "Duplicate username"}},
    summary="Update a user",
)
async def update_user(body: UserUpdate, service: Service) -> MessageResponse:
    username = await service.update_user(
        body.id,
        username=body.username,
        password=body.password,
        name=body.name,
        contact=body.contact,
        bio=body.bio,
        avatar=body.avatar,
        post_id_to_remove=body.post_id_to_remove,
        post_id_to_add=body.post_id_to_add,
    )
    return MessageResponse(message=f"{username}'s data updated!")


@router.patch(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Toggle following a user",
    description=(
        "Follows the target user, or unfollows when already following. "
        "The acting user comes from the refresh cookie."
    ),
)
async def update_follow(
    service: Service,
    actor: Annotated[TokenClaim, Depends(refresh_identity)],
    user_id: str = Path(..., description="User to follow or unfollow"),
) -> MessageResponse:
    async with logger.track_time("update_follow"):
        message = await service.toggle_follow(actor, user_id)
    return MessageResponse(message=message)


@router.delete(
    "",
    response_model=MessageResponse,
    dependencies=[Depends(require_identity)],
    summary="Delete a user",
    description="Removes the user document only; posts and relationships remain",
)
async def delete_user(
    service: Service, body: IdRequest = Body(...)
) -> MessageResponse:
    username, user_id = await service.delete_user(body.id)
    return MessageResponse(message=f"Username {username} with ID {user_id} deleted!")
