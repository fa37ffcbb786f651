"""User-related schema definitions.

This module defines Pydantic models for user data validation and
serialization. Request fields are optional so that the service layer can
report missing values with the API's own messages.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Schema for user registration."""

    username: str | None = Field(None, description="Unique username")
    password: str | None = Field(None, description="Plain-text password")
    name: str | None = Field(None, description="Display name")


class UserUpdate(BaseModel):
    """Schema for partial user updates.

    Only truthy fields are applied. ``postIdToRemove`` deletes the referenced
    post; ``postIdToAdd`` appends a post reference without checking it.
    """

    id: str | None = Field(None, description="User to update")
    username: str | None = None
    password: str | None = None
    name: str | None = None
    contact: str | None = None
    bio: str | None = None
    avatar: str | None = None
    post_id_to_remove: str | None = Field(None, alias="postIdToRemove")
    post_id_to_add: str | None = Field(None, alias="postIdToAdd")
    model_config = ConfigDict(populate_by_name=True)


class UserResponse(BaseModel):
    """Schema for user information response (never includes the password)."""

    id: str = Field(..., alias="_id", description="User ID")
    username: str = Field(..., description="Unique username")
    name: str | None = Field(None, description="Display name")
    contact: str | None = Field(None, description="Contact details")
    bio: str | None = Field(None, description="Profile biography")
    avatar: str | None = Field(None, description="Avatar image path")
    posts: list[str] = Field(default_factory=list, description="Owned post IDs")
    following: list[str] = Field(default_factory=list, description="Followed user IDs")
    followers: list[str] = Field(default_factory=list, description="Follower user IDs")
    model_config = ConfigDict(populate_by_name=True)
