"""Dependency injection and service initialization for Snapgram.

This module implements a service container pattern for managing application
dependencies and their lifecycles. The container builds one Database
instance and hands it to every repository and service; the application
lifespan opens it on startup and closes it on shutdown.

The module provides:
- ServiceContainer: Main container for managing service instances
- Dependency providers: FastAPI-compatible dependency functions
- Identity dependencies: access-token and refresh-cookie verification

Example:
    Using dependency injection in FastAPI routes:
        from fastapi import Depends
        from snapgram.core.dependencies import get_post_service, require_identity

        @router.post("/posts")
        async def create_post(
            body: PostCreate,
            identity: TokenClaim = Depends(require_identity),
            service: PostService = Depends(get_post_service),
        ):
            ...
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

from fastapi import Cookie, Depends, Header

from ..repositories.comments import CommentRepository
from ..repositories.posts import PostRepository
from ..repositories.users import UserRepository
from ..services.auth import AuthService
from ..services.comments import CommentService
from ..services.posts import PostService
from ..services.uploads import UploadService
from ..services.users import UserService
from .database import Database
from .exceptions import AuthenticationError, ForbiddenError
from .security import (
    Authenticated,
    AuthResult,
    TokenClaim,
    TokenService,
    authenticate,
    authenticate_refresh,
)
from .settings import settings


class ServiceContainer:
    """Service container for dependency injection and lifecycle management.

    Services are built once by ``initialize`` and cached for the lifetime
    of the application.

    Example:
        Test setup with an in-memory database:
            container = ServiceContainer()
            container.initialize(database=Database(client=mock_client))
            await container.startup()
    """

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}
        self._initialized = False

    def initialize(
        self,
        database: Database | None = None,
        upload_root: str | Path | None = None,
    ) -> None:
        """Build all services. Idempotent.

        Args:
            database: Database to use instead of one built from settings.
            upload_root: Upload directory overriding UPLOAD_DIRECTORY.
        """
        if self._initialized:
            return

        if database is None:
            database = Database(
                uri=settings.database.uri,
                name=settings.database.name,
                use_transactions=settings.database.use_transactions,
            )
        tokens = TokenService(settings.security)

        users = UserRepository(database)
        posts = PostRepository(database)
        comments = CommentRepository(database)

        post_service = PostService(database, posts, users, comments)

        self._services.update(
            {
                "database": database,
                "token_service": tokens,
                "auth_service": AuthService(users, tokens),
                "post_service": post_service,
                "user_service": UserService(database, users, post_service),
                "comment_service": CommentService(comments, posts),
                "upload_service": UploadService(
                    upload_root or settings.uploads.directory,
                    max_files=settings.uploads.max_files,
                ),
            }
        )
        self._initialized = True

    async def startup(self) -> None:
        self.initialize()
        await self.database.open()

    async def shutdown(self) -> None:
        if self._initialized:
            await self.database.close()

    def get_service(self, service_name: str) -> Any:
        """Get a service instance by name, initializing on first use."""
        if not self._initialized:
            self.initialize()
        return self._services.get(service_name)

    @property
    def database(self) -> Database:
        return self.get_service("database")

    @property
    def token_service(self) -> TokenService:
        return self.get_service("token_service")

    @property
    def auth_service(self) -> AuthService:
        return self.get_service("auth_service")

    @property
    def user_service(self) -> UserService:
        return self.get_service("user_service")

    @property
    def post_service(self) -> PostService:
        return self.get_service("post_service")

    @property
    def comment_service(self) -> CommentService:
        return self.get_service("comment_service")

    @property
    def upload_service(self) -> UploadService:
        return self.get_service("upload_service")


@lru_cache
def get_service_container() -> ServiceContainer:
    """Get the cached service container instance."""
    return ServiceContainer()


# FastAPI dependency provider functions
def get_token_service() -> TokenService:
    return get_service_container().token_service


def get_auth_service() -> AuthService:
    return get_service_container().auth_service


def get_user_service() -> UserService:
    return get_service_container().user_service


def get_post_service() -> PostService:
    return get_service_container().post_service


def get_comment_service() -> CommentService:
    return get_service_container().comment_service


def get_upload_service() -> UploadService:
    return get_service_container().upload_service


def _claim_or_raise(result: AuthResult) -> TokenClaim:
    if isinstance(result, Authenticated):
        return result.claim
    if result.status_code == 403:
        raise ForbiddenError(result.message)
    raise AuthenticationError(result.message)


def require_identity(
    tokens: Annotated[TokenService, Depends(get_token_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> TokenClaim:
    """Identity from ``Authorization: Bearer <access token>``.

    Raises:
        AuthenticationError: Header missing or not a Bearer credential (401).
        ForbiddenError: Token failed verification (403).
    """
    return _claim_or_raise(authenticate(authorization, tokens))


def refresh_identity(
    tokens: Annotated[TokenService, Depends(get_token_service)],
    refresh_token: Annotated[
        str | None, Cookie(alias=settings.security.cookie_name)
    ] = None,
) -> TokenClaim:
    """Identity from the refresh cookie, with the same 401/403 split."""
    return _claim_or_raise(authenticate_refresh(refresh_token, tokens))
