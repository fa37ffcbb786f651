"""Authentication request and response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials posted to the login endpoint."""

    username: str | None = Field(None, description="Account username")
    password: str | None = Field(None, description="Plain-text password")


class TokenResponse(BaseModel):
    """Freshly issued access token."""

    access_token: str = Field(..., alias="accessToken", description="Signed JWT")
    model_config = ConfigDict(populate_by_name=True)
