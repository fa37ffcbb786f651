"""Service module for post operations.

This module provides a PostService class that encapsulates the business
logic for posts, including:

- Listing all posts and the posts owned by one user
- Creating a post and linking it to its owner
- Partial updates, including like toggling and comment linking
- Deleting a post together with its comments and its owner link

Multi-document writes run inside ``Database.transaction()``; without a
replica set they are ordered, independent writes.
"""

from typing import Any

from ..core.database import Database
from ..core.exceptions import (
    ConflictError,
    PostNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from ..core.logging import ContextLogger
from ..core.security import TokenClaim
from ..repositories import serialize, to_object_id
from ..repositories.comments import CommentRepository
from ..repositories.posts import PostRepository
from ..repositories.users import UserRepository

logger = ContextLogger(__name__)


class PostService:
    """Service class for handling post operations."""

    def __init__(
        self,
        database: Database,
        posts: PostRepository,
        users: UserRepository,
        comments: CommentRepository,
    ) -> None:
        self.database = database
        self.posts = posts
        self.users = users
        self.comments = comments

    async def list_posts(self) -> list[dict[str, Any]]:
        posts = await self.posts.list_all()
        if not posts:
            raise PostNotFoundError("No posts found!")
        return [serialize(post) for post in posts]

    async def list_user_posts(self, user_id: str) -> list[dict[str, Any]]:
        """Return the posts referenced by a user's ``posts`` list."""
        if not user_id:
            raise ValidationError("All fields required!")

        oid = to_object_id(user_id)
        user = await self.users.find_by_id(oid) if oid else None
        if not user:
            raise UserNotFoundError("User not found!")

        posts = await self.posts.list_by_ids(user.get("posts", []))
        return [serialize(post) for post in posts]

    async def create_post(
        self, claim: TokenClaim, images: list[str] | None, caption: str | None
    ) -> str:
        """Create a post owned by the token's user and link it.

        Raises:
            ValidationError: If no images are given.
            ConflictError: If the token's user no longer exists.
        """
        if not images:
            raise ValidationError("Picture(s) missing!")

        owner_id = to_object_id(claim.user_id)
        owner = await self.users.find_by_id(owner_id) if owner_id else None
        if not owner:
            raise ConflictError("User not found!")

        async with self.database.transaction() as session:
            post_id = await self.posts.create(owner_id, images, caption, session=session)
            await self.users.add_post(owner_id, post_id, session=session)

        logger.info(
            "Post created",
            extra={"post_id": str(post_id), "user_id": claim.user_id},
        )
        return str(post_id)

    async def update_post(
        self,
        claim: TokenClaim,
        post_id: str | None,
        images: list[str] | None = None,
        caption: str | None = None,
        like: Any = None,
        comment: str | None = None,
    ) -> str:
        """Apply the truthy fields of a partial update.

        ``like`` toggles the caller's id in ``likes``; ``comment`` appends a
        comment id without checking that the comment exists.
        """
        if not post_id:
            raise ValidationError("Post ID required!")

        oid = to_object_id(post_id)
        post = await self.posts.find_by_id(oid) if oid else None
        if not post:
            raise PostNotFoundError("Post not found!")

        comment_id = None
        if comment:
            comment_id = to_object_id(comment)
            if comment_id is None:
                raise ValidationError("Invalid comment ID!")

        fields: dict[str, Any] = {}
        if images:
            fields["images"] = images
        if caption:
            fields["caption"] = caption
        if fields:
            await self.posts.update_fields(oid, fields)

        if like:
            actor_id = to_object_id(claim.user_id)
            liked = await self.posts.toggle_like(oid, actor_id)
            logger.debug(
                "Like toggled",
                extra={"post_id": post_id, "user_id": claim.user_id, "liked": liked},
            )

        if comment_id is not None:
            await self.posts.add_comment(oid, comment_id)

        return str(oid)

    async def delete_post(self, post_id: str | None) -> str:
        """Delete a post, every comment it references, and its owner link.

        Raises:
            ValidationError: If no id is given.
            PostNotFoundError: If the post does not exist.
        """
        if not post_id:
            raise ValidationError("Post ID required!")

        oid = to_object_id(post_id)
        post = await self.posts.find_by_id(oid) if oid else None
        if not post:
            raise PostNotFoundError("Post not found!")

        async with self.database.transaction() as session:
            await self.posts.delete(oid, session=session)
            removed = await self.comments.delete_many(
                post.get("comments", []), session=session
            )
            if post.get("user") is not None:
                await self.users.remove_post(post["user"], oid, session=session)

        logger.info(
            "Post deleted",
            extra={"post_id": post_id, "comments_removed": removed},
        )
        return str(oid)
