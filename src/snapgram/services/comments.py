"""Service module for comment operations.

Comments carry no reference to their post; a post lists its comment ids.
Creating a comment therefore returns its id so the client can attach it to
a post with a post update.
"""

from typing import Any

from ..core.exceptions import (
    CommentNotFoundError,
    PostNotFoundError,
    ValidationError,
)
from ..core.logging import ContextLogger
from ..repositories import serialize, to_object_id
from ..repositories.comments import CommentRepository
from ..repositories.posts import PostRepository

logger = ContextLogger(__name__)


class CommentService:
    def __init__(self, comments: CommentRepository, posts: PostRepository) -> None:
        self.comments = comments
        self.posts = posts

    async def _get(self, comment_id: str) -> dict[str, Any]:
        oid = to_object_id(comment_id)
        comment = await self.comments.find_by_id(oid) if oid else None
        if not comment:
            raise CommentNotFoundError("Comment not found!")
        return comment

    async def list_comments(self) -> list[dict[str, Any]]:
        comments = await self.comments.list_all()
        if not comments:
            raise CommentNotFoundError("No comments found!")
        return [serialize(comment) for comment in comments]

    async def list_post_comments(self, post_id: str) -> list[dict[str, Any]]:
        if not post_id:
            raise ValidationError("All fields required!")

        oid = to_object_id(post_id)
        post = await self.posts.find_by_id(oid) if oid else None
        if not post:
            raise PostNotFoundError("Post not found!")

        comments = await self.comments.list_by_ids(post.get("comments", []))
        return [serialize(comment) for comment in comments]

    async def create_comment(self, user_id: str | None, text: str | None) -> str:
        if not user_id or not text:
            raise ValidationError("All fields required!")

        author_id = to_object_id(user_id)
        if author_id is None:
            raise ValidationError("Invalid user ID!")

        comment_id = await self.comments.create(author_id, text)
        logger.info("Comment created", extra={"comment_id": str(comment_id)})
        return str(comment_id)

    async def update_comment(self, comment_id: str | None, text: str | None) -> str:
        if not comment_id:
            raise ValidationError("All fields required!")

        comment = await self._get(comment_id)
        if text:
            await self.comments.update_text(comment["_id"], text)
        return str(comment["_id"])

    async def delete_comment(self, comment_id: str | None) -> str:
        """Delete a comment document.

        The id stays in any post's ``comments`` list; listing that post's
        comments simply no longer finds it.
        """
        if not comment_id:
            raise ValidationError("Comment ID required!")

        comment = await self._get(comment_id)
        await self.comments.delete(comment["_id"])
        return str(comment["_id"])
