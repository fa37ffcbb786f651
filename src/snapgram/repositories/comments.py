"""Comment documents."""

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId

from ..core.database import Database


class CommentRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    @property
    def collection(self) -> Any:
        return self.database.comments

    async def find_by_id(self, comment_id: ObjectId) -> dict[str, Any] | None:
        return await self.collection.find_one({"_id": comment_id})

    async def list_all(self) -> list[dict[str, Any]]:
        return await self.collection.find({}).to_list(length=None)

    async def list_by_ids(self, comment_ids: list[ObjectId]) -> list[dict[str, Any]]:
        cursor = self.collection.find({"_id": {"$in": comment_ids}})
        return await cursor.to_list(length=None)

    async def create(self, author_id: ObjectId, text: str) -> ObjectId:
        now = datetime.now(timezone.utc)
        result = await self.collection.insert_one(
            {"user": author_id, "text": text, "createdAt": now, "updatedAt": now}
        )
        return result.inserted_id

    async def update_text(self, comment_id: ObjectId, text: str) -> None:
        await self.collection.update_one(
            {"_id": comment_id},
            {"$set": {"text": text, "updatedAt": datetime.now(timezone.utc)}},
        )

    async def delete(self, comment_id: ObjectId) -> bool:
        result = await self.collection.delete_one({"_id": comment_id})
        return result.deleted_count == 1

    async def delete_many(self, comment_ids: list[ObjectId], session: Any = None) -> int:
        if not comment_ids:
            return 0
        result = await self.collection.delete_many(
            {"_id": {"$in": comment_ids}}, session=session
        )
        return result.deleted_count
