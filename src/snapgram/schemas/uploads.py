"""Upload response schema."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    filenames: list[str] = Field(
        ..., description="Stored paths relative to the upload root, '<userId>/<file>'"
    )
