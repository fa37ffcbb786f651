"""Token issuance, verification and the stateless session filter.

Access and refresh tokens are HS256 JWTs carrying the same claim,
``{"user": {"id": ..., "username": ...}}``, signed with different secrets
and lifetimes. ``authenticate`` inspects an Authorization header and returns
either the verified identity or the reason for rejecting it; it never
touches the request object.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from starlette.concurrency import run_in_threadpool
from werkzeug.security import check_password_hash, generate_password_hash

from .settings import SecuritySettings


class InvalidTokenError(Exception):
    """Token signature, expiry or payload failed verification."""


@dataclass(frozen=True)
class TokenClaim:
    """Identity embedded in both tokens."""

    user_id: str
    username: str

    def to_payload(self) -> dict[str, Any]:
        return {"user": {"id": self.user_id, "username": self.username}}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenClaim":
        user = payload.get("user")
        if not isinstance(user, dict) or not user.get("id") or not user.get("username"):
            raise InvalidTokenError("Token payload carries no user claim")
        return cls(user_id=str(user["id"]), username=str(user["username"]))


class TokenService:
    """Signs and verifies access and refresh tokens."""

    def __init__(self, config: SecuritySettings) -> None:
        self.config = config

    @property
    def access_lifetime(self) -> timedelta:
        return timedelta(minutes=self.config.access_token_expire_minutes)

    @property
    def refresh_lifetime(self) -> timedelta:
        return timedelta(days=self.config.refresh_token_expire_days)

    def _sign(self, claim: TokenClaim, secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {**claim.to_payload(), "iat": now, "exp": now + lifetime}
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def issue_access_token(self, claim: TokenClaim) -> str:
        return self._sign(claim, self.config.access_token_secret, self.access_lifetime)

    def issue_refresh_token(self, claim: TokenClaim) -> str:
        return self._sign(
            claim, self.config.refresh_token_secret, self.refresh_lifetime
        )

    def verify(self, token: str, secret: str) -> TokenClaim:
        """Check signature and expiry and return the embedded claim.

        Raises:
            InvalidTokenError: For any verification failure.
        """
        try:
            payload = jwt.decode(token, secret, algorithms=[self.config.algorithm])
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e
        return TokenClaim.from_payload(payload)

    def verify_access(self, token: str) -> TokenClaim:
        return self.verify(token, self.config.access_token_secret)

    def verify_refresh(self, token: str) -> TokenClaim:
        return self.verify(token, self.config.refresh_token_secret)


@dataclass(frozen=True)
class Authenticated:
    claim: TokenClaim


@dataclass(frozen=True)
class Rejected:
    """Why a request carries no usable identity.

    ``status_code`` is 401 when no credential was presented and 403 when
    one was presented but failed verification.
    """

    status_code: int
    message: str


AuthResult = Authenticated | Rejected


def authenticate(authorization: str | None, tokens: TokenService) -> AuthResult:
    """Verify a ``Bearer <token>`` Authorization header value."""
    if not authorization or not authorization.startswith("Bearer "):
        return Rejected(401, "Unauthorized!")

    token = authorization[len("Bearer "):].strip()
    try:
        return Authenticated(tokens.verify_access(token))
    except InvalidTokenError:
        return Rejected(403, "Forbidden!")


def authenticate_refresh(cookie: str | None, tokens: TokenService) -> AuthResult:
    """Verify a refresh cookie value with the same result contract."""
    if not cookie:
        return Rejected(401, "Unauthorized!")
    try:
        return Authenticated(tokens.verify_refresh(cookie))
    except InvalidTokenError:
        return Rejected(403, "Forbidden!")


async def hash_password(password: str) -> str:
    return await run_in_threadpool(generate_password_hash, password)


async def verify_password(password_hash: str, password: str) -> bool:
    return await run_in_threadpool(check_password_hash, password_hash, password)
