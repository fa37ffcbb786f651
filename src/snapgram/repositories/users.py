"""User documents and the relationship lists they embed."""

from typing import Any

from bson import ObjectId

from ..core.database import Database

DEFAULT_AVATAR = "/images/default_avatar.jpg"

# Never sent back to clients.
PUBLIC_PROJECTION = {"password": 0}


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def collection(self) -> Any:
        return self.database.users

    async def find_by_id(
        self, user_id: ObjectId, session: Any = None
    ) -> dict[str, Any] | None:
        return await self.collection.find_one({"_id": user_id}, session=session)

    async def find_by_username(self, username: str) -> dict[str, Any] | None:
        return await self.collection.find_one({"username": username})

    async def list_public(self) -> list[dict[str, Any]]:
        cursor = self.collection.find({}, PUBLIC_PROJECTION)
        return await cursor.to_list(length=None)

    async def search_public(self, pattern: str) -> list[dict[str, Any]]:
        cursor = self.collection.find(
            {"username": {"$regex": pattern, "$options": "i"}}, PUBLIC_PROJECTION
        )
        return await cursor.to_list(length=None)

    async def create(
        self, username: str, password_hash: str, name: str | None = None
    ) -> ObjectId:
        document = {
            "username": username,
            "password": password_hash,
            "name": name,
            "contact": None,
            "bio": None,
            "avatar": DEFAULT_AVATAR,
            "posts": [],
            "following": [],
            "followers": [],
        }
        result = await self.collection.insert_one(document)
        return result.inserted_id

    async def update_fields(self, user_id: ObjectId, fields: dict[str, Any]) -> None:
        if fields:
            await self.collection.update_one({"_id": user_id}, {"$set": fields})

    async def delete(self, user_id: ObjectId) -> bool:
        result = await self.collection.delete_one({"_id": user_id})
        return result.deleted_count == 1

    async def add_post(
        self, user_id: ObjectId, post_id: ObjectId, session: Any = None
    ) -> None:
        await self.collection.update_one(
            {"_id": user_id}, {"$addToSet": {"posts": post_id}}, session=session
        )

    async def push_post(self, user_id: ObjectId, post_id: ObjectId) -> None:
        """Append a post reference even if it is already listed."""
        await self.collection.update_one({"_id": user_id}, {"$push": {"posts": post_id}})

    async def remove_post(
        self, user_id: ObjectId, post_id: ObjectId, session: Any = None
    ) -> None:
        await self.collection.update_one(
            {"_id": user_id}, {"$pull": {"posts": post_id}}, session=session
        )

    async def follow(
        self, actor_id: ObjectId, target_id: ObjectId, session: Any = None
    ) -> None:
        """Record that actor follows target on both documents."""
        await self.collection.update_one(
            {"_id": actor_id}, {"$addToSet": {"following": target_id}}, session=session
        )
        await self.collection.update_one(
            {"_id": target_id}, {"$addToSet": {"followers": actor_id}}, session=session
        )

    async def unfollow(
        self, actor_id: ObjectId, target_id: ObjectId, session: Any = None
    ) -> None:
        """Remove the actor → target follow from both documents."""
        await self.collection.update_one(
            {"_id": actor_id}, {"$pull": {"following": target_id}}, session=session
        )
        await self.collection.update_one(
            {"_id": target_id}, {"$pull": {"followers": actor_id}}, session=session
        )
