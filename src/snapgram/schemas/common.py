"""Schemas shared by several resources."""

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by mutation endpoints."""

    message: str = Field(..., description="Human-readable result")


class IdRequest(BaseModel):
    """Body of the delete endpoints."""

    id: str | None = Field(None, description="Identifier of the target document")
