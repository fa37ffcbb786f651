"""Image upload endpoint.

Accepts a multipart form with up to ten ``images`` files and a ``userId``
field, stores the files under that user's directory and returns their
relative paths for use in a post.

Authentication:
    Requires ``Authorization: Bearer <access token>``. The storage
    directory is still chosen by the ``userId`` form field.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..core.dependencies import get_upload_service, require_identity
from ..core.logging import ContextLogger
from ..core.security import TokenClaim
from ..schemas.uploads import UploadResponse
from ..services.uploads import UploadService

logger = ContextLogger(__name__)

router = APIRouter(
    prefix="/uploads",
    tags=["uploads"],
    responses={400: {"description": "No files, too many files, or a non-image file"}},
)


@router.post("", response_model=UploadResponse, summary="Upload post images")
async def upload_images(
    identity: Annotated[TokenClaim, Depends(require_identity)],
    service: Annotated[UploadService, Depends(get_upload_service)],
    images: Annotated[list[UploadFile] | None, File()] = None,
    user_id: Annotated[str | None, Form(alias="userId")] = None,
) -> UploadResponse:
    if user_id and user_id != identity.user_id:
        logger.warning(
            "Upload directory differs from authenticated user",
            extra={"form_user_id": user_id, "token_user_id": identity.user_id},
        )

    async with logger.track_time("upload_images"):
        filenames = await service.save(user_id, images or [])
    return UploadResponse(filenames=filenames)
