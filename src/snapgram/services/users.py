"""Service module for handling user-related operations.

This module provides a UserService class that encapsulates the business
logic for user accounts, including:

- Listing and regex-searching users (passwords are never returned)
- Registering users with hashed passwords and unique usernames
- Partial profile updates, including removing or appending owned posts
- Toggling follow relationships on both user documents
- Deleting users

Deleting a user removes only the user document. Their posts, comments and
entries in other users' relationship lists are left in place.
"""

import re
from typing import Any

from pymongo.errors import DuplicateKeyError

from ..core.database import Database
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    UserNotFoundError,
    ValidationError,
)
from ..core.logging import ContextLogger
from ..core.security import TokenClaim, hash_password
from ..repositories import serialize, to_object_id
from ..repositories.users import UserRepository
from .posts import PostService

logger = ContextLogger(__name__)


class UserService:
    """Service class for handling user-related operations."""

    def __init__(
        self, database: Database, users: UserRepository, posts: PostService
    ) -> None:
        self.database = database
        self.users = users
        self.posts = posts

    async def _get(self, user_id: str | None) -> dict[str, Any]:
        oid = to_object_id(user_id)
        user = await self.users.find_by_id(oid) if oid else None
        if not user:
            raise UserNotFoundError("User not found!")
        return user

    async def list_users(self) -> list[dict[str, Any]]:
        users = await self.users.list_public()
        if not users:
            raise UserNotFoundError("No users found!")
        return [serialize(user) for user in users]

    async def search_users(self, query: str) -> list[dict[str, Any]]:
        """Case-insensitive regex search on usernames."""
        if not query:
            raise ValidationError("Query required!")
        try:
            re.compile(query)
        except re.error as e:
            raise ValidationError("Invalid search query!") from e
        return [serialize(user) for user in await self.users.search_public(query)]

    async def create_user(
        self, username: str | None, password: str | None, name: str | None = None
    ) -> str:
        """Register a user and return its username.

        Raises:
            ValidationError: If username or password is missing.
            ConflictError: If the username is taken.
        """
        if not username or not password:
            raise ValidationError("All fields required!")

        if await self.users.find_by_username(username):
            raise ConflictError("Duplicate username!")

        password_hash = await hash_password(password)
        try:
            user_id = await self.users.create(username, password_hash, name)
        except DuplicateKeyError as e:
            # Lost a race against a concurrent registration.
            raise ConflictError("Duplicate username!") from e

        logger.info("User created", extra={"user_id": str(user_id)})
        return username

    async def update_user(
        self,
        user_id: str | None,
        username: str | None = None,
        password: str | None = None,
        name: str | None = None,
        contact: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
        post_id_to_remove: str | None = None,
        post_id_to_add: str | None = None,
    ) -> str:
        """Apply a partial update and return the resulting username.

        ``post_id_to_remove`` deletes that post (comments included) before
        unlinking it; ``post_id_to_add`` appends a reference unchecked.
        """
        if not user_id:
            raise ValidationError("All fields required!")

        user = await self._get(user_id)
        oid = user["_id"]

        if username:
            duplicate = await self.users.find_by_username(username)
            if duplicate and duplicate["_id"] != oid:
                raise ConflictError("Duplicate username!")

        fields: dict[str, Any] = {}
        if username:
            fields["username"] = username
        if password:
            fields["password"] = await hash_password(password)
        for key, value in (
            ("name", name),
            ("contact", contact),
            ("bio", bio),
            ("avatar", avatar),
        ):
            if value:
                fields[key] = value

        add_id = None
        if post_id_to_add:
            add_id = to_object_id(post_id_to_add)
            if add_id is None:
                raise ValidationError("Invalid post ID!")

        if post_id_to_remove:
            await self.posts.delete_post(post_id_to_remove)
            await self.users.remove_post(oid, to_object_id(post_id_to_remove))

        try:
            await self.users.update_fields(oid, fields)
        except DuplicateKeyError as e:
            raise ConflictError("Duplicate username!") from e

        if add_id is not None:
            await self.users.push_post(oid, add_id)

        return fields.get("username", user["username"])

    async def toggle_follow(self, actor: TokenClaim, target_id: str | None) -> str:
        """Follow ``target_id`` if the actor does not already, else unfollow.

        Returns:
            The acknowledgement message naming both users.

        Raises:
            ValidationError: If no target id is given.
            UserNotFoundError: If the target does not exist.
            AuthenticationError: If the actor no longer exists.
        """
        if not target_id:
            raise ValidationError("User ID required!")

        target = await self._get(target_id)

        actor_oid = to_object_id(actor.user_id)
        actor_doc = await self.users.find_by_id(actor_oid) if actor_oid else None
        if not actor_doc:
            raise AuthenticationError("Unauthorized user!")

        async with self.database.transaction() as session:
            if target["_id"] in actor_doc.get("following", []):
                await self.users.unfollow(actor_oid, target["_id"], session=session)
                action = "unfollow"
            else:
                await self.users.follow(actor_oid, target["_id"], session=session)
                action = "follow"

        logger.info(
            "Follow toggled",
            extra={
                "actor_id": actor.user_id,
                "target_id": target_id,
                "action": action,
            },
        )
        return (
            f"{actor_doc['username']}'s following count and "
            f"{target['username']}'s followers' count updated!"
        )

    async def delete_user(self, user_id: str | None) -> tuple[str, str]:
        """Hard-delete a user document. Returns ``(username, id)``."""
        if not user_id:
            raise ValidationError("User ID required!")

        user = await self._get(user_id)
        await self.users.delete(user["_id"])
        logger.info("User deleted", extra={"user_id": str(user["_id"])})
        return user["username"], str(user["_id"])
