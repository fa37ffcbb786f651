"""Schema definitions for posts."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a post. The owner comes from the access token."""

    images: list[str] | None = Field(None, description="Uploaded image paths")
    caption: str | None = Field(None, description="Optional caption")


class PostUpdate(BaseModel):
    """Schema for partial post updates.

    Attributes:
        id: Post to update.
        images: Replacement image list, applied when non-empty.
        caption: Replacement caption, applied when non-empty.
        like: Flag; when truthy the caller's like is toggled.
        comment: Comment ID appended to the post's comment list.
    """

    id: str | None = None
    images: list[str] | None = None
    caption: str | None = None
    like: Any = None
    comment: str | None = None


class PostResponse(BaseModel):
    """Schema for a stored post."""

    id: str = Field(..., alias="_id", description="Post ID")
    user: str = Field(..., description="Owner user ID")
    images: list[str] = Field(default_factory=list, description="Image paths")
    caption: str | None = Field(None, description="Caption")
    likes: list[str] = Field(default_factory=list, description="IDs of liking users")
    comments: list[str] = Field(default_factory=list, description="Comment IDs")
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    model_config = ConfigDict(populate_by_name=True)
