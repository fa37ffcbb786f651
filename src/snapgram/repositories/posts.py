"""Post documents."""

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId

from ..core.database import Database


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PostRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def collection(self) -> Any:
        return self.database.posts

    async def find_by_id(
        self, post_id: ObjectId, session: Any = None
    ) -> dict[str, Any] | None:
        return await self.collection.find_one({"_id": post_id}, session=session)

    async def list_all(self) -> list[dict[str, Any]]:
        return await self.collection.find({}).to_list(length=None)

    async def list_by_ids(self, post_ids: list[ObjectId]) -> list[dict[str, Any]]:
        return await self.collection.find({"_id": {"$in": post_ids}}).to_list(length=None)

    async def create(
        self,
        owner_id: ObjectId,
        images: list[str],
        caption: str | None = None,
        session: Any = None,
    ) -> ObjectId:
        now = _now()
        document = {
            "user": owner_id,
            "images": images,
            "caption": caption,
            "likes": [],
            "comments": [],
            "createdAt": now,
            "updatedAt": now,
        }
        result = await self.collection.insert_one(document, session=session)
        return result.inserted_id

    async def update_fields(self, post_id: ObjectId, fields: dict[str, Any]) -> None:
        await self.collection.update_one(
            {"_id": post_id}, {"$set": {**fields, "updatedAt": _now()}}
        )

    async def toggle_like(self, post_id: ObjectId, user_id: ObjectId) -> bool:
        """Flip ``user_id`` in the post's likes. Returns True if now liked.

        The pull only matches when the user is present, so a concurrent
        toggle can never leave the id listed twice.
        """
        removed = await self.collection.update_one(
            {"_id": post_id, "likes": user_id},
            {"$pull": {"likes": user_id}, "$set": {"updatedAt": _now()}},
        )
        if removed.modified_count:
            return False
        await self.collection.update_one(
            {"_id": post_id},
            {"$addToSet": {"likes": user_id}, "$set": {"updatedAt": _now()}},
        )
        return True

    async def add_comment(self, post_id: ObjectId, comment_id: ObjectId) -> None:
        await self.collection.update_one(
            {"_id": post_id},
            {"$push": {"comments": comment_id}, "$set": {"updatedAt": _now()}},
        )

    async def delete(self, post_id: ObjectId, session: Any = None) -> bool:
        result = await self.collection.delete_one({"_id": post_id}, session=session)
        return result.deleted_count == 1
