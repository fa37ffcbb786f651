"""Service module for login and access token refresh.

The login operation checks a username/password pair against the stored
credential and mints an access/refresh token pair. The refresh operation
re-issues an access token from a verified refresh claim, provided the user
still exists. Refresh tokens are not rotated.
"""

from dataclasses import dataclass

from ..core.exceptions import AuthenticationError, ValidationError
from ..core.logging import ContextLogger
from ..core.security import TokenClaim, TokenService, verify_password
from ..repositories import to_object_id
from ..repositories.users import UserRepository

logger = ContextLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class AuthService:
    """Credential checks and token issuance."""

    def __init__(self, users: UserRepository, tokens: TokenService) -> None:
        self.users = users
        self.tokens = tokens

    async def login(self, username: str | None, password: str | None) -> TokenPair:
        """Verify credentials and issue both tokens.

        Raises:
            ValidationError: If either field is missing.
            AuthenticationError: If the user is unknown or the password
                does not match. Both cases share one message.
        """
        if not username or not password:
            raise ValidationError("All fields required!")

        user = await self.users.find_by_username(username)
        if not user or not await verify_password(user["password"], password):
            logger.warning("Login rejected", extra={"username": username})
            raise AuthenticationError("Unauthorized!")

        claim = TokenClaim(user_id=str(user["_id"]), username=user["username"])
        logger.info("User logged in", extra={"user_id": claim.user_id})
        return TokenPair(
            access_token=self.tokens.issue_access_token(claim),
            refresh_token=self.tokens.issue_refresh_token(claim),
        )

    async def refresh(self, claim: TokenClaim) -> str:
        """Issue a new access token for a verified refresh claim.

        The new token is built from the stored user, so a renamed user gets
        the current username.

        Raises:
            AuthenticationError: If the user no longer exists.
        """
        user_id = to_object_id(claim.user_id)
        user = await self.users.find_by_id(user_id) if user_id else None
        if not user:
            raise AuthenticationError("Unauthorized user!")

        fresh = TokenClaim(user_id=str(user["_id"]), username=user["username"])
        return self.tokens.issue_access_token(fresh)
