"""
Uploads API

Admin-only image upload endpoint. Stored files are served by the static
mount at /uploads.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from govivid.shared.auth import require_admin
from govivid.shared.context import ServerContext, get_context

router = APIRouter(prefix="/api", tags=["uploads"])


class ImageUploadRequest(BaseModel):
    # Any so a non-string payload gets the handler's 400, not a validation error
    data: Any = None
    filename: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")


class ImageUploadResponse(BaseModel):
    """Response after successful image upload."""
    ok: bool = True
    url: str
    filename: str


@router.post("/uploads", response_model=ImageUploadResponse)
async def upload_image(
    upload: ImageUploadRequest,
    admin: Optional[str] = Depends(require_admin),
    context: ServerContext = Depends(get_context),
):
    """
    Upload a base64-encoded image.
    Returns the URL of the stored image.
    """
    return await context.uploads.save(
        upload.data,
        filename=upload.filename,
        mime_type=upload.mime_type,
    )
