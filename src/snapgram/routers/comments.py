"""Comment API endpoints.

Authentication:
    Every endpoint requires ``Authorization: Bearer <access token>``.

A new comment is attached to a post by sending its id as ``comment`` in a
post update.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path

from ..core.dependencies import get_comment_service, require_identity
from ..schemas.comments import (
    CommentCreate,
    CommentCreated,
    CommentResponse,
    CommentUpdate,
)
from ..schemas.common import IdRequest, MessageResponse
from ..services.comments import CommentService

router = APIRouter(
    prefix="/comments",
    tags=["comments"],
    dependencies=[Depends(require_identity)],
    responses={400: {"description": "Missing fields or comment not found"}},
)

Service = Annotated[CommentService, Depends(get_comment_service)]


@router.get("", response_model=list[CommentResponse], summary="List all comments")
async def get_comments(service: Service) -> list[dict]:
    return await service.list_comments()


@router.get(
    "/{post_id}",
    response_model=list[CommentResponse],
    summary="List a post's comments",
)
async def get_comments_by_post(
    service: Service,
    post_id: str = Path(..., description="Post whose comments are listed"),
) -> list[dict]:
    return await service.list_post_comments(post_id)


@router.post("", response_model=CommentCreated, summary="Create a comment")
async def create_comment(body: CommentCreate, service: Service) -> CommentCreated:
    comment_id = await service.create_comment(body.user, body.text)
    return CommentCreated(comment_id=comment_id)


@router.patch("", response_model=MessageResponse, summary="Update a comment")
async def update_comment(body: CommentUpdate, service: Service) -> MessageResponse:
    comment_id = await service.update_comment(body.id, body.text)
    return MessageResponse(message=f"Comment {comment_id} updated!")


@router.delete("", response_model=MessageResponse, summary="Delete a comment")
async def delete_comment(
    service: Service, body: IdRequest = Body(...)
) -> MessageResponse:
    comment_id = await service.delete_comment(body.id)
    return MessageResponse(message=f"Comment {comment_id} deleted!")
