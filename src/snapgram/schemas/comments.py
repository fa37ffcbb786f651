"""Schema definitions for comments."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    user: str | None = Field(None, description="Author user ID")
    text: str | None = Field(None, description="Comment text")


class CommentUpdate(BaseModel):
    id: str | None = None
    text: str | None = None


class CommentCreated(BaseModel):
    comment_id: str = Field(..., alias="commentId")
    model_config = ConfigDict(populate_by_name=True)


class CommentResponse(BaseModel):
    id: str = Field(..., alias="_id")
    user: str
    text: str
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    model_config = ConfigDict(populate_by_name=True)
