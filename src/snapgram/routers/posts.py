"""Post-related API endpoints.

This module provides RESTful API endpoints for managing posts including:
- Listing all posts and the posts of one user
- Creating posts owned by the authenticated user
- Partial updates, like toggling and comment linking
- Deleting posts together with their comments

Authentication:
    Every endpoint requires ``Authorization: Bearer <access token>``.

Example Usage:
    Create a post:
        POST /posts
        {"images": ["6650f0.../1717171717171-beach.jpg"], "caption": "Beach day"}

    Toggle a like:
        PATCH /posts
        {"id": "6650f0c2a1b2c3d4e5f60718", "like": true}
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path, status

from ..core.dependencies import get_post_service, require_identity
from ..core.logging import ContextLogger
from ..core.security import TokenClaim
from ..schemas.common import IdRequest, MessageResponse
from ..schemas.posts import PostCreate, PostResponse, PostUpdate
from ..services.posts import PostService

logger = ContextLogger(__name__)

router = APIRouter(
    prefix="/posts",
    tags=["posts"],
    dependencies=[Depends(require_identity)],
    responses={
        400: {"description": "Missing fields or post not found"},
        401: {"description": "Missing or malformed credentials"},
        403: {"description": "Token invalid or expired"},
    },
)

Service = Annotated[PostService, Depends(get_post_service)]
Identity = Annotated[TokenClaim, Depends(require_identity)]


@router.get("", response_model=list[PostResponse], summary="List all posts")
async def get_all_posts(service: Service) -> list[dict]:
    return await service.list_posts()


@router.get(
    "/{user_id}",
    response_model=list[PostResponse],
    summary="List a user's posts",
)
async def get_posts_by_user(
    service: Service,
    user_id: str = Path(..., description="Owner whose posts are listed"),
) -> list[dict]:
    return await service.list_user_posts(user_id)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Authenticated user no longer exists"}},
    summary="Create a post",
)
async def create_post(
    body: PostCreate, identity: Identity, service: Service
) -> MessageResponse:
    """Create a post owned by the authenticated user.

    The owner is always taken from the access token, never from the body.
    """
    async with logger.track_time("create_post"):
        await service.create_post(identity, body.images, body.caption)
    return MessageResponse(message="New post created!")


@router.patch("", response_model=MessageResponse, summary="Update a post")
async def update_post(
    body: PostUpdate, identity: Identity, service: Service
) -> MessageResponse:
    post_id = await service.update_post(
        identity,
        body.id,
        images=body.images,
        caption=body.caption,
        like=body.like,
        comment=body.comment,
    )
    return MessageResponse(message=f"Post {post_id} updated!")


@router.delete("", response_model=MessageResponse, summary="Delete a post")
async def delete_post(
    service: Service, body: IdRequest = Body(...)
) -> MessageResponse:
    async with logger.track_time("delete_post"):
        post_id = await service.delete_post(body.id)
    return MessageResponse(message=f"Post {post_id} deleted!")
